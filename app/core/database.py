import logging
from pathlib import Path

from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import QueuePool

from app.core.config import settings

logger = logging.getLogger(__name__)

# -----------------------
# Database URL
# -----------------------
DATABASE_URL = make_url(settings.database_url)
IS_SQLITE = DATABASE_URL.get_backend_name() == "sqlite"

# Hide password in logs
logger.info(f"Connecting to database: {DATABASE_URL.render_as_string(hide_password=True)}")


def _ensure_sqlite_directory(url) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    if url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)


# -----------------------
# SQLAlchemy engine
# -----------------------
if IS_SQLITE:
    _ensure_sqlite_directory(DATABASE_URL)
    engine = create_engine(
        DATABASE_URL,
        echo=settings.debug,
        connect_args={
            "check_same_thread": False,
            "timeout": settings.db_busy_timeout,
        },
    )
else:
    engine = create_engine(
        DATABASE_URL,
        echo=settings.debug,
        poolclass=QueuePool,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
        pool_recycle=1800,
        pool_pre_ping=True,
    )


# -----------------------
# SQLite: foreign keys and real SAVEPOINT support
# -----------------------
if IS_SQLITE:

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        # Let SQLAlchemy emit BEGIN itself so SAVEPOINT works with pysqlite
        dbapi_conn.isolation_level = None
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")


def is_lock_conflict(exc: OperationalError) -> bool:
    """True when SQLite refused a write because another transaction holds the lock."""
    return IS_SQLITE and any(
        marker in str(exc.orig).lower() for marker in ("database is locked", "database is busy")
    )


# -----------------------
# Session and Base
# -----------------------
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


# -----------------------
# Dependency for FastAPI
# -----------------------
def get_db():
    db = SessionLocal()
    try:
        yield db
    except Exception as e:
        logger.error(f"Database error occurred: {str(e)}")
        db.rollback()
        raise
    finally:
        db.close()
