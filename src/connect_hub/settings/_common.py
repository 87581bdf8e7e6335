"""Keys shared by every environment; each settings module star-imports this."""
import os

from . import PLACEHOLDER_SECRET_KEY, env_flag, split_csv

SECRET_KEY = os.getenv("SECRET_KEY", PLACEHOLDER_SECRET_KEY)

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "connect_hub"),
    "pool_size": int(os.getenv("DB_POOL_SIZE", "5")),
}

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "json")
SENTRY_DSN = os.getenv("SENTRY_DSN")

SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY", "")
OAUTH_REDIRECT_URL = os.getenv("OAUTH_REDIRECT_URL", "http://localhost:3000/auth/callback")

# S3-compatible object storage (Supabase Storage, Cloudflare R2, MinIO...)
STORAGE = {
    "endpoint_url": os.getenv("STORAGE_ENDPOINT_URL"),
    "region": os.getenv("STORAGE_REGION", "auto"),
    "access_key_id": os.getenv("STORAGE_ACCESS_KEY_ID"),
    "secret_access_key": os.getenv("STORAGE_SECRET_ACCESS_KEY"),
    "public_base_url": os.getenv("STORAGE_PUBLIC_BASE_URL"),
}
ATTENDANCE_PHOTO_BUCKET = os.getenv("ATTENDANCE_PHOTO_BUCKET", "connect-attendance")
BLOG_IMAGE_BUCKET = os.getenv("BLOG_IMAGE_BUCKET", "blog-images")
EVENT_POSTER_BUCKET = os.getenv("EVENT_POSTER_BUCKET", "event-posters")

# Scratch directory for exported reports; None means the system temp dir.
EXPORT_DIR = os.getenv("EXPORT_DIR") or None

BREVO_API_KEY = os.getenv("BREVO_API_KEY")
EMAIL_FROM = os.getenv("EMAIL_FROM", "noreply@connecthub.local")
EMAIL_FROM_NAME = os.getenv("EMAIL_FROM_NAME", "Connect Hub")
ADMIN_EMAILS = split_csv(os.getenv("ADMIN_EMAILS"))
FORM_WEBHOOK_API_KEY = os.getenv("FORM_WEBHOOK_API_KEY")

AUTO_SEED_DB = env_flag("AUTO_SEED_DB", "0")
