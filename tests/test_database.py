"""
ProductsCatalog — Database Engine Tests
"""

from __future__ import annotations

import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from app.config import Settings
from app.database import Base, build_engine
from app.models.carts import CartEntry


@pytest.fixture
def sqlite_engine():
    engine = build_engine(Settings(DATABASE_URL="sqlite:///:memory:"))
    yield engine
    engine.dispose()


def test_settings_detect_sqlite():
    assert Settings(DATABASE_URL="sqlite:///:memory:").is_sqlite is True
    assert Settings(DATABASE_URL="postgresql://u:p@db/catalog").is_sqlite is False


def test_sqlite_foreign_keys_enabled(sqlite_engine):
    with sqlite_engine.connect() as conn:
        assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1


def test_cart_entry_requires_existing_user(sqlite_engine):
    Base.metadata.create_all(sqlite_engine)
    with sqlite_engine.connect() as conn:
        with pytest.raises(IntegrityError):
            conn.execute(
                CartEntry.__table__.insert().values(
                    id="entry-1", user_id="no-such-user", item_count=1, total_value=1
                )
            )
