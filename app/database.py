"""
ProductsCatalog — Database Engine & Session Factory
One engine per process; one session per request.
"""

from __future__ import annotations

from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from app.config import Settings, get_settings


class Base(DeclarativeBase):
    """Declarative base for users, products and cart_entries."""

    pass


def _enable_sqlite_foreign_keys(engine: Engine) -> None:
    # cart_entries.user_id -> users.id is only enforced with this pragma
    @event.listens_for(engine, "connect")
    def _set_pragma(dbapi_conn, _connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(settings: Settings) -> Engine:
    if settings.is_sqlite:
        engine = create_engine(
            settings.DATABASE_URL,
            connect_args={"check_same_thread": False},
        )
        _enable_sqlite_foreign_keys(engine)
        return engine

    return create_engine(settings.DATABASE_URL, pool_pre_ping=True)


settings = get_settings()
engine: Engine = build_engine(settings)

SessionLocal: sessionmaker[Session] = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency: a session per request, closed afterwards."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create the catalog tables. Called from the app lifespan and scripts/init_db.py."""
    # Registers the tables on Base.metadata
    from app.models import carts, products, users  # noqa: F401

    Base.metadata.create_all(bind=engine)
