from __future__ import annotations

from functools import lru_cache

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool

from stockkeeper.core.config import settings


def enable_sqlite_foreign_keys(engine: Engine) -> None:
    """SQLite only enforces foreign keys when asked to, once per connection."""

    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):  # noqa: ARG001
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(database_url: str) -> Engine:
    if database_url.startswith("sqlite"):
        engine = create_engine(database_url, echo=False, future=True)
    else:
        engine = create_engine(
            database_url,
            echo=False,
            future=True,
            poolclass=QueuePool,
            pool_size=5,
            max_overflow=10,
            pool_timeout=30,
            pool_recycle=1800,
            pool_pre_ping=True,
        )
    enable_sqlite_foreign_keys(engine)
    return engine


# The pool is process-wide and built on first use, never at import time.
@lru_cache()
def get_engine() -> Engine:
    return build_engine(settings.database_url)


@lru_cache()
def get_sessionmaker() -> sessionmaker[Session]:
    return sessionmaker(bind=get_engine(), expire_on_commit=False, autoflush=False, future=True)


def get_session():
    db = get_sessionmaker()()
    try:
        yield db
    finally:
        db.close()
