from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module, load_settings

from .completions.controller import register as register_completions
from .container import Container, build_container
from .core.constants import DEFAULT_LONG_DAY_HOURS, DEFAULT_MAX_ENTRY_DAYS, DEFAULT_MONTHS_BACK, DEFAULT_MONTHS_FORWARD
from .database.bootstrap import apply_schema, list_tables
from .obligations.controller import register as register_obligations
from .roster.controller import register as register_roster

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = load_settings()
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

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            months_back=int(getattr(settings, "PERIOD_MONTHS_BACK", DEFAULT_MONTHS_BACK)),
            months_forward=int(getattr(settings, "PERIOD_MONTHS_FORWARD", DEFAULT_MONTHS_FORWARD)),
            long_day_hours=float(getattr(settings, "LONG_DAY_HOURS", DEFAULT_LONG_DAY_HOURS)),
            max_entry_days=int(getattr(settings, "MAX_ENTRY_DAYS", DEFAULT_MAX_ENTRY_DAYS)),
        )

    register_obligations(app, container)
    register_completions(app, container)
    register_roster(app, container)

    return app
