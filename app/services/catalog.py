"""
ProductsCatalog — Catalog & Cart Service
Product creation/listing and appending rows to the cart ledger.
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.decimal_utils import display_round, monetary
from app.core.exceptions import ConflictError, InvalidInputError, NotFoundError
from app.core.logging import logger
from app.models.carts import CartEntry
from app.models.products import Product
from app.services.auth import get_user_by_login, normalize_login

MIN_PRODUCT_NAME_LENGTH = 3


def add_product(
    db: Session, name: str, price: Decimal, image_url: Optional[str] = None
) -> Product:
    name = name.strip()
    if len(name) < MIN_PRODUCT_NAME_LENGTH:
        raise InvalidInputError(
            f"Product name must have at least {MIN_PRODUCT_NAME_LENGTH} non-blank characters"
        )
    price = monetary(price)
    if price <= 0:
        raise InvalidInputError("Price must be greater than zero", {"price": str(price)})

    if db.query(Product).filter(Product.name == name).first() is not None:
        raise ConflictError("Product", "name", name)

    product = Product(name=name, image_url=image_url, price=display_round(price))
    db.add(product)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("Product", "name", name) from exc
    db.refresh(product)
    logger.info(f"Product {product.name!r} added at {product.price}")
    return product


def list_products(db: Session) -> List[Product]:
    return db.query(Product).order_by(Product.name).all()


def add_to_cart(
    db: Session, login: str, total_value: Decimal, item_count: int
) -> CartEntry:
    """Append a cart row for the account identified by login."""
    total_value = monetary(total_value)
    if total_value < 0 or item_count < 0:
        raise InvalidInputError(
            "Cart quantities must not be negative",
            {"total_value": str(total_value), "item_count": item_count},
        )

    user = get_user_by_login(db, normalize_login(login))
    if user is None:
        raise NotFoundError("User", login)

    entry = CartEntry(
        user_id=user.id,
        item_count=item_count,
        total_value=display_round(total_value),
    )
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry
