import logging
import os

from alembic.config import Config
from sqlalchemy import Connection, create_engine, event
from sqlalchemy.engine import Engine

from alembic import command
from settlement.settings import settings

logger = logging.getLogger(__name__)

_engine: Engine | None = None
_connection: Connection | None = None


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # bill_records and bill_line_items rely on their foreign keys
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        url = settings.db_url
        if url.startswith("sqlite"):
            _engine = create_engine(url)
            event.listen(_engine, "connect", _enable_sqlite_foreign_keys)
        else:
            _engine = create_engine(url, pool_pre_ping=True, pool_recycle=1800)
        logger.info("Database engine created (%s)", _engine.url.get_backend_name())
    return _engine


def get_connection() -> Connection:
    """Return the process-wide connection shared by the repositories.

    Settlement runs are single-writer; every repository call commits on this
    connection.
    """
    global _connection
    if _connection is None:
        _connection = get_engine().connect()
        logger.debug("Singleton DB connection created")
    return _connection


def close_connection() -> None:
    global _connection
    if _connection is not None:
        _connection.close()
        _connection = None
        logger.debug("Singleton DB connection closed")


def _get_alembic_config() -> Config:
    """Alembic config for the project root alembic.ini, pointed at ``settings.db_url``."""
    project_root = os.path.dirname(os.path.dirname(__file__))
    ini_path = os.path.join(project_root, "alembic.ini")
    if not os.path.exists(ini_path):
        ini_path = os.path.join(os.getcwd(), "alembic.ini")
    cfg = Config(ini_path)
    cfg.set_main_option("sqlalchemy.url", settings.db_url.replace("%", "%%"))
    return cfg


def initialize_db() -> None:
    """Bring the schema up to the latest migration."""
    logger.info("Running Alembic migrations")
    command.upgrade(_get_alembic_config(), "head")
    logger.info("Migrations complete")
