"""FastAPI endpoints for the Catalog domain: stores and products."""

from fastapi import APIRouter, Depends
from protean.exceptions import ObjectNotFoundError

from catalog.api.schemas import (
    CreateProductRequest,
    CreateStoreRequest,
    ProductDetailResponse,
    ProductListResponse,
    ProductResponse,
    ProductView,
    StoreResponse,
    StoreView,
    UpdateStoreRequest,
)
from identity.api.dependencies import current_context
from identity.context import RequestContext
from shared.api import get_marketplace

store_router = APIRouter(prefix="/stores", tags=["stores"])
product_router = APIRouter(prefix="/products", tags=["products"])


# --- Store endpoints ---


@store_router.post("", status_code=201, response_model=StoreResponse)
async def create_store(
    body: CreateStoreRequest,
    ctx: RequestContext = Depends(current_context),
    marketplace=Depends(get_marketplace),
) -> StoreResponse:
    store = marketplace.catalog.create_store(
        ctx,
        name=body.name,
        category=body.category,
        description=body.description,
        banner_image=body.banner_image,
    )
    return StoreResponse(store=StoreView.from_store(store))


@store_router.put("/{store_id}", response_model=StoreResponse)
async def update_store(
    store_id: str,
    body: UpdateStoreRequest,
    ctx: RequestContext = Depends(current_context),
    marketplace=Depends(get_marketplace),
) -> StoreResponse:
    store = marketplace.catalog.update_store(
        ctx,
        store_id,
        name=body.name,
        description=body.description,
        category=body.category,
        banner_image=body.banner_image,
    )
    return StoreResponse(store=StoreView.from_store(store))


@store_router.get("/{store_id}/products", response_model=ProductListResponse)
async def list_store_products(store_id: str, marketplace=Depends(get_marketplace)) -> ProductListResponse:
    """Public listing of a store's products with license pools redacted."""
    products = marketplace.catalog.products_for_store(store_id)
    return ProductListResponse(products=[ProductView.from_product(product, redacted=True) for product in products])


# --- Product endpoints ---


@product_router.post("", status_code=201, response_model=ProductResponse)
async def create_product(
    body: CreateProductRequest,
    ctx: RequestContext = Depends(current_context),
    marketplace=Depends(get_marketplace),
) -> ProductResponse:
    if not body.store_id:
        raise ObjectNotFoundError({"store": ["Store not found"]})
    product = marketplace.catalog.create_product(
        ctx,
        body.store_id,
        title=body.title,
        price=body.price,
        kind=body.kind,
        description=body.description,
        billing_interval=body.billing_interval,
        trial_days=body.trial_days,
        deliverables=body.deliverables,
        affiliate_percent=body.affiliate_percent,
    )
    return ProductResponse(product=ProductView.from_product(product))


@product_router.get("/{product_id}", response_model=ProductDetailResponse)
async def get_product(product_id: str, marketplace=Depends(get_marketplace)) -> ProductDetailResponse:
    product = marketplace.catalog.get_product(product_id)
    store = marketplace.catalog.get_store(str(product.store_id))
    return ProductDetailResponse(
        product=ProductView.from_product(product, redacted=True),
        store=StoreView.from_store(store),
    )
