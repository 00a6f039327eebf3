from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv

from config import get_settings_module

from .container import Container, build_container
from .core.constants import DEFAULT_REPORT_NAME
from .core.policy import AttendancePolicy
from .database.bootstrap import apply_schema, list_tables
from .database.connection import DBConfig

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO), format=LOG_FORMAT)


def load_settings():
    load_dotenv(override=False)
    return importlib.import_module(get_settings_module())


def create_container(settings=None) -> Container:
    settings = settings or load_settings()
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    db_config = dict(getattr(settings, "DB_CONFIG"))
    logger.info("settings=%s db=%s", settings.__name__, DBConfig.from_dict(db_config).describe())

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=SCHEMA_PATH)
        logger.info("schema ready (tables=%d)", len(list_tables(db_config)))

    return build_container(
        db_config=db_config,
        policy=AttendancePolicy.from_settings(settings),
        report_name=str(getattr(settings, "REPORT_NAME", DEFAULT_REPORT_NAME)),
    )
