"""Pydantic request/response schemas for the Catalog API."""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from catalog.product import Product
from catalog.store import Store
from shared.money import to_money

# ---------------------------------------------------------------------------
# Store schemas
# ---------------------------------------------------------------------------


class CreateStoreRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Acme",
                    "description": "Tools for builders",
                    "category": "tools",
                    "banner_image": "https://cdn.example.com/acme.png",
                }
            ]
        }
    }

    name: str | None = Field(None, max_length=255)
    description: str | None = None
    category: str | None = Field(None, max_length=100)
    banner_image: str | None = None


class UpdateStoreRequest(BaseModel):
    name: str | None = Field(None, max_length=255)
    description: str | None = None
    category: str | None = Field(None, max_length=100)
    banner_image: str | None = None


class StoreView(BaseModel):
    id: str
    owner_id: str
    name: str
    description: str
    category: str
    banner_image: str
    created_at: datetime
    updated_at: datetime | None = None

    @classmethod
    def from_store(cls, store: Store) -> "StoreView":
        return cls(
            id=str(store.id),
            owner_id=str(store.owner_id),
            name=store.name,
            description=store.description or "",
            category=store.category,
            banner_image=store.banner_image or "",
            created_at=store.created_at,
            updated_at=store.updated_at,
        )


class StoreResponse(BaseModel):
    store: StoreView


# ---------------------------------------------------------------------------
# Product schemas
# ---------------------------------------------------------------------------


class CreateProductRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "store_id": "3f1c...",
                    "title": "Pro Plan",
                    "price": "9.99",
                    "kind": "subscription",
                    "billing_interval": "monthly",
                    "deliverables": [{"kind": "license_keys", "details": {"keys": ["KEY-1", "KEY-2"]}}],
                    "affiliate_percent": 20,
                }
            ]
        }
    }

    store_id: str | None = None
    title: str | None = Field(None, max_length=255)
    description: str | None = None
    price: Decimal | None = None
    kind: str | None = None
    billing_interval: str | None = None
    trial_days: int | None = None
    deliverables: list[dict[str, Any]] | None = None
    affiliate_percent: Decimal | None = None


class ProductView(BaseModel):
    id: str
    store_id: str
    title: str
    description: str
    price: Decimal
    kind: str
    billing_interval: str | None = None
    trial_days: int | None = None
    deliverables: list[dict[str, Any]]
    affiliate_percent: Decimal
    created_at: datetime

    @classmethod
    def from_product(cls, product: Product, redacted: bool = False) -> "ProductView":
        """With ``redacted`` set, license pools show a count instead of their keys."""
        return cls(
            id=str(product.id),
            store_id=str(product.store_id),
            title=product.title,
            description=product.description or "",
            price=product.amount,
            kind=product.kind,
            billing_interval=product.billing_interval,
            trial_days=product.trial_days,
            deliverables=[
                deliverable.public_spec() if redacted else deliverable.spec() for deliverable in product.specs()
            ],
            affiliate_percent=to_money(product.affiliate_percent),
            created_at=product.created_at,
        )


class ProductResponse(BaseModel):
    product: ProductView


class ProductDetailResponse(BaseModel):
    product: ProductView
    store: StoreView


class ProductListResponse(BaseModel):
    products: list[ProductView]
