from ._common import *  # noqa: F401,F403

ENVIRONMENT = "testing"
SECRET_KEY = "test-secret"
DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"
SENTRY_DSN = None

AUTO_INIT_DB = False
AUTO_SEED_DB = False
ADMIN_EMAILS = ("admin@connecthub.local",)
