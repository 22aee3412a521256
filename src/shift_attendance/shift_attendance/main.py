from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .container import build_container
from .database.bootstrap import apply_schema, list_tables

logger = logging.getLogger(__name__)


def create_app(container=None, settings_module: Optional[str] = None) -> Flask:
    """Build the Flask app. Tests pass their own ``container`` to skip MySQL."""
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module, db_config.get("user"), db_config.get("host"),
            db_config.get("port", 3306), db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            utc_offset=getattr(settings, "ORG_UTC_OFFSET", "+05:30"),
            tolerance_hours=float(getattr(settings, "MATCH_TOLERANCE_HOURS", 3)),
            max_workers=int(getattr(settings, "PROCESSING_MAX_WORKERS", 4)),
            lock_timeout_seconds=float(getattr(settings, "LOCK_TIMEOUT_SECONDS", 30)),
            lock_backend=getattr(settings, "LOCK_BACKEND", "process"),
        )

    app.extensions["container"] = container
    register_attendance(app, container)

    return app
