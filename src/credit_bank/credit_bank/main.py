from __future__ import annotations

import importlib
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .activities.controller import register as register_activities
from .analytics.controller import register as register_analytics
from .attendance.controller import register as register_attendance
from .container import Container, build_container
from .core.constants import DEFAULT_SESSION_MINUTES, DEFAULT_TOKEN_TTL_HOURS
from .database.bootstrap import apply_schema, ensure_demo_users, list_tables
from .database.connection import DBConfig
from .profiles.controller import register as register_profiles
from .users.controller import register as register_users
from .web import register_error_handlers

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _configure_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    logging.getLogger().setLevel(level.upper())


def create_app(container: Optional[Container] = None, *, settings_module: Optional[str] = None) -> Flask:
    """Application factory.

    Pass ``container`` to run against pre-built repositories (tests do this
    with in-memory fakes); otherwise MySQL repositories are built from settings.
    """

    load_dotenv(override=False)
    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)

    _configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app = Flask(__name__)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["DEFAULT_SESSION_MINUTES"] = int(getattr(settings, "DEFAULT_SESSION_MINUTES", DEFAULT_SESSION_MINUTES))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info("settings=%s db=%s", settings_module, DBConfig.from_mapping(db_config).describe())

        schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=schema_path)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_demo_users(db_config)

        container = build_container(
            db_config=db_config,
            jwt_secret=getattr(settings, "JWT_SECRET"),
            token_ttl_hours=int(getattr(settings, "TOKEN_TTL_HOURS", DEFAULT_TOKEN_TTL_HOURS)),
        )

    app.extensions["credit_bank"] = container

    register_error_handlers(app)
    register_users(app, container)
    register_profiles(app, container)
    register_attendance(app, container)
    register_activities(app, container)
    register_analytics(app, container)

    @app.route("/api/health", endpoint="health")
    def health():
        return jsonify(
            {
                "status": "OK",
                "message": "Academic Bank of Credits backend is running",
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        )

    return app
