"""
ProductsCatalog — Purchase Aggregation
Rolls the cart ledger up into one summary row per account.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import List

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.decimal_utils import display_round, monetary
from app.models.carts import CartEntry
from app.models.users import User


@dataclass(frozen=True)
class PurchaseSummary:
    login: str
    user_id: str
    total_items: int
    total_value: Decimal


def summarize(db: Session) -> List[PurchaseSummary]:
    """
    Join every cart entry to its owning account, group by account and sum
    item counts and values. Full scan, no pagination. Accounts with no cart
    entries are absent. Ordered by login.
    """
    stmt = (
        select(
            User.login,
            CartEntry.user_id,
            func.sum(CartEntry.item_count).label("total_items"),
            func.sum(CartEntry.total_value).label("total_value"),
        )
        .join(User, CartEntry.user_id == User.id)
        .group_by(CartEntry.user_id, User.login)
        .order_by(User.login)
    )

    return [
        PurchaseSummary(
            login=row.login,
            user_id=row.user_id,
            total_items=int(row.total_items or 0),
            total_value=display_round(monetary(row.total_value)),
        )
        for row in db.execute(stmt)
    ]
