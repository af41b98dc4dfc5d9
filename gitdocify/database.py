"""Engine, session factory and declarative base for users and documents.

SQLite is the development default; PostgreSQL gets a pooled engine sized by
the DB_POOL_* settings.
"""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .core.config import settings

DATABASE_URL = settings.database_url


def database_kind(url: str = DATABASE_URL) -> str:
    """Human-readable backend name for startup logs."""
    return "PostgreSQL" if url.startswith("postgresql") else "SQLite"


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # Deleting a user only cascades to their documents with this pragma on.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str) -> Engine:
    """Create the engine for *url* with backend-specific options."""
    if url.startswith("sqlite"):
        sqlite_engine = create_engine(url, connect_args={"check_same_thread": False})
        event.listen(sqlite_engine, "connect", _enable_sqlite_foreign_keys)
        return sqlite_engine
    return create_engine(
        url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
        pool_recycle=settings.db_pool_recycle,
        pool_pre_ping=True,
    )


engine = build_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """Request-scoped session; rolled back if the handler raises."""
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
