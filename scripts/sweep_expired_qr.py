"""Deactivate expired check-in QR codes once. Suitable for cron when the in-process sweeper is off."""

from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.community_events.community_events.common.datetime_utils import now_local
from src.community_events.community_events.container import mysql_repositories


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=getattr(logging, str(getattr(settings, "LOG_LEVEL", "INFO")).upper(), logging.INFO))

    count = mysql_repositories(settings.DB_CONFIG).qrcodes.deactivate_expired(now_local())
    print(f"OK: deactivated {count} expired QR code(s)")


if __name__ == "__main__":
    main()
