"""Database connection and session management.

This module handles the database connection using SQLAlchemy.
"""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from config import DATA_DIR, DATABASE_URL
from models.base import Base
# Import models to ensure they are registered with Base.metadata
import models  # noqa: F401


def register_sqlite_functions(target: Engine) -> None:
    """Replace SQLite's ASCII-only ``lower()`` on every new connection.

    Case-insensitive searches compare ``lower(column)`` with a term lowered
    in Python, so both sides must fold non-ASCII letters the same way.
    """
    if target.dialect.name != "sqlite":
        return

    @event.listens_for(target, "connect")
    def _on_connect(dbapi_conn, connection_record):
        dbapi_conn.create_function("lower", 1, _lower, deterministic=True)


def _lower(value):
    return value.lower() if isinstance(value, str) else value


connect_args = {}
if DATABASE_URL.startswith("sqlite"):
    # Ensure data directory exists
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    connect_args = {"check_same_thread": False}

engine = create_engine(DATABASE_URL, connect_args=connect_args)
register_sqlite_functions(engine)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind=None) -> None:
    """Create tables if they do not exist."""
    Base.metadata.create_all(bind=bind or engine)


def get_db():
    """Dependency for getting a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
