"""
ProductsCatalog — Products, cart and client-summary endpoints
"""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.core.gate import require_admin
from app.core.security import Identity
from app.database import get_db
from app.models.products import Product
from app.services import catalog, purchases

router = APIRouter(prefix="/product", tags=["products"])


class ProductResponse(BaseModel):
    id: str
    name: str
    image_url: Optional[str]
    price: str


class CreateProductRequest(BaseModel):
    name: str = Field(..., min_length=3, max_length=100)
    image_url: Optional[str] = Field(None, max_length=500)
    price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)


class AddToCartRequest(BaseModel):
    login: str = Field(..., min_length=3, max_length=100)
    total_value: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    item_count: int = Field(..., ge=0)


class CartEntryResponse(BaseModel):
    id: str
    user_id: str
    item_count: int
    total_value: str


class ClientSummaryResponse(BaseModel):
    user_name: str
    user_id: str
    total_items: int
    total_value: str


def _product_response(product: Product) -> ProductResponse:
    return ProductResponse(
        id=product.id,
        name=product.name,
        image_url=product.image_url,
        price=str(product.price),
    )


@router.post(
    "/add", response_model=ProductResponse, status_code=status.HTTP_201_CREATED
)
def create_product(
    req: CreateProductRequest,
    db: Session = Depends(get_db),
    _admin: Identity = Depends(require_admin),
):
    product = catalog.add_product(db, req.name, req.price, req.image_url)
    return _product_response(product)


@router.get("", response_model=List[ProductResponse])
def list_products(db: Session = Depends(get_db)):
    return [_product_response(p) for p in catalog.list_products(db)]


@router.post("/chart/add", response_model=CartEntryResponse)
def add_to_cart(req: AddToCartRequest, db: Session = Depends(get_db)):
    entry = catalog.add_to_cart(db, req.login, req.total_value, req.item_count)
    return CartEntryResponse(
        id=entry.id,
        user_id=entry.user_id,
        item_count=entry.item_count,
        total_value=str(entry.total_value),
    )


@router.get("/clients", response_model=List[ClientSummaryResponse])
def list_clients(
    db: Session = Depends(get_db),
    _admin: Identity = Depends(require_admin),
):
    """Purchase totals per client, ordered by login."""
    return [
        ClientSummaryResponse(
            user_name=s.login,
            user_id=s.user_id,
            total_items=s.total_items,
            total_value=str(s.total_value),
        )
        for s in purchases.summarize(db)
    ]
