"""FastAPI routes for the Ordering domain: checkout and orders."""

from fastapi import APIRouter, Depends
from protean.exceptions import ObjectNotFoundError

from catalog.api.schemas import ProductView
from identity.api.dependencies import current_context
from identity.context import RequestContext
from ordering.api.schemas import CheckoutRequest, OrderDetail, OrderListResponse, OrderResponse, OrderView
from shared.api import get_marketplace

checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])
order_router = APIRouter(prefix="/orders", tags=["orders"])


@checkout_router.post("", status_code=201, response_model=OrderResponse)
async def checkout(
    body: CheckoutRequest,
    ctx: RequestContext = Depends(current_context),
    marketplace=Depends(get_marketplace),
) -> OrderResponse:
    """Buy a product. Payment is simulated and succeeds immediately."""
    if not body.product_id:
        raise ObjectNotFoundError({"product": ["Product not found"]})
    order = marketplace.orders.checkout(ctx, body.product_id, referral_code=body.referral_code)
    return OrderResponse(order=OrderView.from_order(order))


@order_router.get("", response_model=OrderListResponse)
async def list_orders(
    ctx: RequestContext = Depends(current_context),
    marketplace=Depends(get_marketplace),
) -> OrderListResponse:
    orders = [
        OrderDetail(
            **OrderView.fields_of(view.order),
            product=ProductView.from_product(view.product, redacted=True) if view.product else None,
        )
        for view in marketplace.orders.list_for_user(ctx)
    ]
    return OrderListResponse(orders=orders)


@order_router.post("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: str,
    ctx: RequestContext = Depends(current_context),
    marketplace=Depends(get_marketplace),
) -> OrderResponse:
    order = marketplace.orders.cancel(ctx, order_id)
    return OrderResponse(order=OrderView.from_order(order))
