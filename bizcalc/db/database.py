"""
Database connection and session management.
"""

import os
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, Session

from bizcalc.config import get_settings
from bizcalc.db.models import Base

settings = get_settings()

if settings.database_url.startswith("sqlite"):
    engine = create_engine(
        settings.database_url,
        connect_args={"check_same_thread": False},  # Needed for SQLite
    )
else:
    engine = create_engine(settings.database_url, pool_pre_ping=True)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def sqlite_file_path(database_url) -> Optional[str]:
    """Path of a file-backed SQLite database, or None."""
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return None
    if not url.database or url.database == ":memory:":
        return None
    return url.database


def ensure_sqlite_directory(database_url: str):
    """Create the parent directory of a file-backed SQLite database."""
    path = sqlite_file_path(database_url)
    if not path:
        return

    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)


def database_file_size(database_url) -> int:
    """Size in bytes of the database file. 0 for in-memory or missing files."""
    path = sqlite_file_path(database_url)
    if not path or not os.path.isfile(path):
        return 0
    return os.path.getsize(path)


def init_db():
    """Initialize database tables."""
    ensure_sqlite_directory(settings.database_url)
    Base.metadata.create_all(bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Dependency for getting database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_db_context() -> Generator[Session, None, None]:
    """Context manager for database sessions (for use outside FastAPI)."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
