import logging
from pathlib import Path

from alembic.config import Config
from sqlalchemy import Connection, create_engine
from sqlalchemy.engine import Engine, make_url

from alembic import command
from clinicdesk.settings import settings

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent

_engine: Engine | None = None
_connection: Connection | None = None


def _engine_options(db_url: str) -> dict:
    if make_url(db_url).get_backend_name() == "sqlite":
        # The API may touch the file from uvicorn's worker threads.
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True, "pool_recycle": 1800}


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = create_engine(settings.db_url, **_engine_options(settings.db_url))
        logger.info("Database engine created for %s", make_url(settings.db_url).get_backend_name())
    return _engine


def get_connection() -> Connection:
    """Process-wide connection for the CLI and scripts.

    The API opens one connection per request in ``DBConnectionMiddleware``.
    """
    global _connection
    if _connection is None:
        _connection = get_engine().connect()
        logger.debug("CLI DB connection opened")
    return _connection


def close_connection() -> None:
    global _connection
    if _connection is not None:
        _connection.close()
        _connection = None
        logger.debug("CLI DB connection closed")


def _get_alembic_config(db_url: str | None = None) -> Config:
    cfg = Config(str(PROJECT_ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    # configparser interpolation treats % specially
    cfg.set_main_option("sqlalchemy.url", (db_url or settings.db_url).replace("%", "%%"))
    return cfg


def initialize_db(db_url: str | None = None) -> None:
    """Bring the schema up to the latest Alembic revision."""
    logger.info("Running Alembic migrations")
    command.upgrade(_get_alembic_config(db_url), "head")
    logger.info("Migrations complete")
