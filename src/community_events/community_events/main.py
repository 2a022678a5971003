from __future__ import annotations

import importlib
import logging
from pathlib import Path
from types import ModuleType
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .container import Container, container_from_settings
from .core.enums import ErrorCode
from .core.exceptions import DomainError
from .dashboard.controller import register as register_dashboard
from .database.bootstrap import apply_schema, ensure_demo_users, list_tables
from .events.controller import register as register_events
from .invitations.controller import register as register_invitations
from .qrcodes.controller import register as register_qrcodes
from .qrcodes.sweeper import ExpiredTokenSweeper
from .registrations.controller import register as register_registrations
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _bootstrap_database(settings: ModuleType) -> None:
    db_config = settings.DB_CONFIG
    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=SCHEMA_PATH)
        logger.info("Schema ready (tables=%s)", len(list_tables(db_config)))
    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        ensure_demo_users(db_config)
        logger.info("Demo users ready")


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        return jsonify({"success": False, "message": e.message, "code": e.code.value}), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return jsonify({"success": False, "message": e.description, "code": e.name.upper().replace(" ", "_")}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("Unhandled error")
        message = str(e) if app.config.get("DEBUG") else "Internal server error"
        return jsonify({"success": False, "message": message, "code": ErrorCode.INTERNAL_ERROR.value}), 500


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    A prebuilt `container` skips database bootstrap and the QR sweeper (tests pass in-memory ones).
    """
    load_dotenv(override=False)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    _configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app = Flask(__name__)
    app.secret_key = settings.SECRET_KEY
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    db_config = settings.DB_CONFIG
    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if container is None:
        if not getattr(settings, "QR_SECRET", ""):
            raise RuntimeError("QR_SECRET must be set")
        _bootstrap_database(settings)
        container = container_from_settings(settings)

        interval = int(getattr(settings, "QR_SWEEP_INTERVAL_SECONDS", 0))
        if interval > 0:
            sweeper = ExpiredTokenSweeper(container.qrcode_service, interval)
            sweeper.start()
            app.extensions["qr_sweeper"] = sweeper

    _register_error_handlers(app)

    @app.route("/health", endpoint="health")
    def health():
        return jsonify({"success": True, "message": "OK", "data": {"status": "healthy"}})

    register_users(app, container)
    register_events(app, container)
    register_registrations(app, container)
    register_attendance(app, container)
    register_qrcodes(app, container)
    register_invitations(app, container)
    register_dashboard(app, container)

    return app
