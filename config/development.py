import os

from .config import *  # noqa: F401,F403
from .config import env_flag

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
QR_SECRET = os.getenv("QR_SECRET", "dev-qr-secret")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "1")
# Optional: also seed demo users on startup
AUTO_SEED_DB = env_flag("AUTO_SEED_DB", "0")
