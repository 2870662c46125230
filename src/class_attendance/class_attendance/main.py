from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .container import Container, build_container
from .core.exceptions import (
    AttendanceLockedError,
    ConcurrentUpdateError,
    DomainError,
    DuplicateError,
    NoDataError,
    NotFoundError,
    ValidationError,
)
from .database.bootstrap import apply_schema
from .notifications.controller import register as register_notifications
from .reports.controller import register as register_reports

logger = logging.getLogger(__name__)

# Most specific first.
_STATUS_BY_ERROR: tuple[tuple[type[DomainError], int], ...] = (
    (ValidationError, 400),
    (NotFoundError, 404),
    (NoDataError, 404),
    (DuplicateError, 409),
    (ConcurrentUpdateError, 409),
    (AttendanceLockedError, 423),
)


def _status_for(error: DomainError) -> int:
    for error_cls, status in _STATUS_BY_ERROR:
        if isinstance(error, error_cls):
            return status
    return 400


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(error: DomainError):
        status = _status_for(error)
        logger.info("%s -> %d: %s", error.__class__.__name__, status, error)
        return jsonify({"success": False, "error": error.__class__.__name__, "message": str(error)}), status

    @app.errorhandler(Exception)
    def handle_unexpected(error: Exception):
        if isinstance(error, HTTPException):
            return error
        logger.exception("unhandled error")
        return jsonify({"success": False, "message": "Internal server error"}), 500


def create_app(*, container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        container = build_container(settings=settings)
        if bool(getattr(settings, "AUTO_INIT_DB", False)) and container.conn is not None:
            apply_schema(container.conn)

    register_error_handlers(app)
    register_attendance(app, container)
    register_reports(app, container)
    register_notifications(app, container)

    return app
