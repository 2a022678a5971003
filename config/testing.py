from .config import *  # noqa: F401,F403

SECRET_KEY = "test-secret"
QR_SECRET = "test-qr-secret"
FRONTEND_URL = "http://frontend.test"

DEBUG = False
TESTING = True

NOTIFICATION_BACKEND = "log"
QR_SWEEP_INTERVAL_SECONDS = 0

AUTO_INIT_DB = False
AUTO_SEED_DB = False
