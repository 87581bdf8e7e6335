from ._common import *  # noqa: F401,F403
from ._common import env_flag

ENVIRONMENT = "development"
DEBUG = True
LOG_FORMAT = "console"

# If enabled, the app applies schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "1")
