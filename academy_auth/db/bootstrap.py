# academy_auth/db/bootstrap.py
import os
from typing import Optional

import structlog
from alembic import command
from alembic.config import Config
from sqlalchemy.orm import Session

from academy_auth.core.config import Settings, settings as default_settings
from academy_auth.db.init_db import init_db
from academy_auth.db.session import _normalize, build_engine

logger = structlog.get_logger(__name__)

BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))


def alembic_config(config: Settings) -> Config:
    cfg = Config(os.path.join(BASE_DIR, "alembic.ini"))
    cfg.set_main_option("script_location", os.path.join(BASE_DIR, "migrations"))
    cfg.set_main_option("sqlalchemy.url", _normalize(config.DATABASE_URL).replace("%", "%%"))
    return cfg


def run_migrations_and_seed(config: Optional[Settings] = None) -> None:
    """Bring the schema to head for ``config.DATABASE_URL``, then seed the admin."""
    config = config or default_settings
    command.upgrade(alembic_config(config), "head")
    logger.info("migrations_applied", revision="head")

    engine = build_engine(config.DATABASE_URL)
    try:
        with Session(engine, expire_on_commit=False) as db:
            init_db(db, config)
    finally:
        engine.dispose()
