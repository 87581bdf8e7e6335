from ._common import *  # noqa: F401,F403
from ._common import SECRET_KEY, env_flag
from . import PLACEHOLDER_SECRET_KEY

ENVIRONMENT = "production"
DEBUG = False

AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "0")

if SECRET_KEY == PLACEHOLDER_SECRET_KEY:
    raise RuntimeError("SECRET_KEY must be set in production")
