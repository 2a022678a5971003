"""Settings shared by every environment. Environment modules import from here and override."""

import os


def env_flag(name: str, default: str = "0") -> bool:
    return bool(int(os.getenv(name, default)))


DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "community_events"),
}

# Signs check-in QR tokens; rotating it invalidates every issued code.
QR_SECRET = os.getenv("QR_SECRET", "")
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")
QR_DEFAULT_TTL_HOURS = int(os.getenv("QR_DEFAULT_TTL_HOURS", "24"))
# 0 disables the background sweeper (use scripts/sweep_expired_qr.py from cron instead)
QR_SWEEP_INTERVAL_SECONDS = int(os.getenv("QR_SWEEP_INTERVAL_SECONDS", "300"))

# "log" writes messages to the log, "smtp" delivers email (and SMS if SMS_* is set)
NOTIFICATION_BACKEND = os.getenv("NOTIFICATION_BACKEND", "log")

SMTP_HOST = os.getenv("SMTP_HOST", "localhost")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USERNAME = os.getenv("SMTP_USERNAME", "")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD", "")
SMTP_FROM = os.getenv("SMTP_FROM", "noreply@localhost")
SMTP_START_TLS = env_flag("SMTP_START_TLS", "1")

SMS_API_URL = os.getenv("SMS_API_URL", "https://api.twilio.com/2010-04-01")
SMS_ACCOUNT_SID = os.getenv("SMS_ACCOUNT_SID", "")
SMS_AUTH_TOKEN = os.getenv("SMS_AUTH_TOKEN", "")
SMS_FROM_NUMBER = os.getenv("SMS_FROM_NUMBER", "")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
