"""
ProductsCatalog — Shared pytest fixtures.
"""

from __future__ import annotations

import os
import secrets
from contextlib import suppress
from datetime import datetime, timedelta, timezone
from typing import Dict, Generator, List

import pytest
from fastapi.testclient import TestClient
from loguru import logger as loguru_logger
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# ─── Environment setup (before any app imports) ───────────────────────────────

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", secrets.token_hex(32))
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("LOG_LEVEL", "WARNING")

# ─── App imports (after env is set) ───────────────────────────────────────────

from app.core.security import TokenService, get_token_service  # noqa: E402
from app.database import Base  # noqa: E402
from app.models import carts, products, users  # noqa: E402,F401
from app.models.users import ROLE_ADMIN, ROLE_USER, User  # noqa: E402

PASSWORD = "s3cret-pass"

# ─────────────────────────────────────────────────────────────────────────────
# CLOCK / TOKEN FIXTURES
# ─────────────────────────────────────────────────────────────────────────────


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def token_service(clock: FrozenClock) -> TokenService:
    return TokenService(secret="unit-test-secret", clock=clock)


# ─────────────────────────────────────────────────────────────────────────────
# DATABASE FIXTURES
# ─────────────────────────────────────────────────────────────────────────────


def _make_engine():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def set_pragmas(dbapi_conn, _):
        cur = dbapi_conn.cursor()
        cur.execute("PRAGMA foreign_keys=ON")
        cur.close()

    Base.metadata.create_all(engine)
    return engine


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """In-memory SQLite session — fresh for every test function."""
    engine = _make_engine()
    TestingSession = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


# ─────────────────────────────────────────────────────────────────────────────
# FASTAPI CLIENT FIXTURE
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """FastAPI TestClient with overridden DB dependency."""
    from app.database import get_db
    from app.main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


# ─────────────────────────────────────────────────────────────────────────────
# ACCOUNT FIXTURES
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def alice(db_session: Session) -> User:
    from app.services.auth import create_user

    return create_user(db_session, "alice", PASSWORD, ROLE_USER)


@pytest.fixture
def admin_user(db_session: Session) -> User:
    from app.config import get_settings
    from app.services.auth import create_user

    return create_user(db_session, get_settings().ADMIN_LOGIN, PASSWORD, ROLE_ADMIN)


def auth_headers(user: User) -> Dict[str, str]:
    """Bearer header signed by the application's own token service."""
    issued = get_token_service().issue(user.id, user.login, user.role)
    return {"Authorization": f"Bearer {issued.token}"}


@pytest.fixture
def log_messages() -> Generator[List[str], None, None]:
    """Everything written to loguru during the test, one formatted line each."""
    messages: List[str] = []
    sink_id = loguru_logger.add(messages.append, format="{message}", level="DEBUG")
    yield messages
    # setup_logging() removes all sinks, including this one
    with suppress(ValueError):
        loguru_logger.remove(sink_id)


@pytest.fixture
def password() -> str:
    return PASSWORD


@pytest.fixture
def user_headers(alice: User) -> Dict[str, str]:
    return auth_headers(alice)


@pytest.fixture
def admin_headers(admin_user: User) -> Dict[str, str]:
    return auth_headers(admin_user)
