"""Settings modules, selected by ``APP_ENV``.

Each module is a flat list of upper-case names read from the environment;
``load_settings`` turns the selected one into a typed ``Settings`` value.
"""
from __future__ import annotations

import importlib
import os
from dataclasses import dataclass, field
from types import ModuleType
from typing import Any, Dict, Optional, Tuple, Union

PLACEHOLDER_SECRET_KEY = "please-set-SECRET_KEY"


def get_settings_module() -> str:
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "connect_hub.settings.production"
    if env in {"test", "testing"}:
        return "connect_hub.settings.testing"
    return "connect_hub.settings.development"


def split_csv(value: Optional[str]) -> Tuple[str, ...]:
    return tuple(part.strip() for part in (value or "").split(",") if part.strip())


def env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    secret_key: str
    db_config: Dict[str, Any]
    debug: bool = False
    testing: bool = False
    auto_init_db: bool = False
    auto_seed_db: bool = False

    log_level: str = "INFO"
    log_format: str = "json"
    sentry_dsn: Optional[str] = None
    environment: str = "development"

    supabase_url: str = ""
    supabase_anon_key: str = ""
    oauth_redirect_url: str = ""

    storage: Dict[str, Any] = field(default_factory=dict)
    attendance_photo_bucket: str = "connect-attendance"
    blog_image_bucket: str = "blog-images"
    event_poster_bucket: str = "event-posters"
    export_dir: Optional[str] = None

    brevo_api_key: Optional[str] = None
    email_from: str = "noreply@connecthub.local"
    email_from_name: str = "Connect Hub"
    admin_emails: Tuple[str, ...] = ()
    form_webhook_api_key: Optional[str] = None

    @classmethod
    def from_module(cls, settings: ModuleType) -> "Settings":
        def get(name: str, default: Any = None) -> Any:
            return getattr(settings, name, default)

        admin_emails = get("ADMIN_EMAILS", ())
        if isinstance(admin_emails, str):
            admin_emails = split_csv(admin_emails)

        return cls(
            secret_key=str(get("SECRET_KEY")),
            db_config=dict(get("DB_CONFIG", {})),
            debug=bool(get("DEBUG", False)),
            testing=bool(get("TESTING", False)),
            auto_init_db=bool(get("AUTO_INIT_DB", False)),
            auto_seed_db=bool(get("AUTO_SEED_DB", False)),
            log_level=str(get("LOG_LEVEL", "INFO")),
            log_format=str(get("LOG_FORMAT", "json")),
            sentry_dsn=get("SENTRY_DSN") or None,
            environment=str(get("ENVIRONMENT", "development")),
            supabase_url=str(get("SUPABASE_URL", "")),
            supabase_anon_key=str(get("SUPABASE_ANON_KEY", "")),
            oauth_redirect_url=str(get("OAUTH_REDIRECT_URL", "")),
            storage=dict(get("STORAGE", {})),
            attendance_photo_bucket=str(get("ATTENDANCE_PHOTO_BUCKET", "connect-attendance")),
            blog_image_bucket=str(get("BLOG_IMAGE_BUCKET", "blog-images")),
            event_poster_bucket=str(get("EVENT_POSTER_BUCKET", "event-posters")),
            export_dir=get("EXPORT_DIR") or None,
            brevo_api_key=get("BREVO_API_KEY") or None,
            email_from=str(get("EMAIL_FROM", "noreply@connecthub.local")),
            email_from_name=str(get("EMAIL_FROM_NAME", "Connect Hub")),
            admin_emails=tuple(admin_emails),
            form_webhook_api_key=get("FORM_WEBHOOK_API_KEY") or None,
        )


def load_settings(module: Union[str, ModuleType, None] = None) -> Settings:
    if module is None:
        module = get_settings_module()
    if isinstance(module, str):
        module = importlib.import_module(module)
    return Settings.from_module(module)
