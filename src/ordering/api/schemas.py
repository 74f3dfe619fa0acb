"""Pydantic request/response schemas for the Ordering API."""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel

from catalog.api.schemas import ProductView
from ordering.order import Order


class CheckoutRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_id": "8c9e...",
                    "referral_code": "q1w2e3r4",
                }
            ]
        }
    }

    product_id: str | None = None
    referral_code: str | None = None


class OrderView(BaseModel):
    id: str
    buyer_id: str
    product_id: str
    price: Decimal
    status: str
    created_at: datetime
    next_billing_at: datetime | None = None
    ended_at: datetime | None = None
    deliverables: list[dict[str, Any]]
    affiliate_referrer_id: str | None = None
    affiliate_commission: Decimal
    payment_transaction_id: str | None = None

    @classmethod
    def fields_of(cls, order: Order) -> dict[str, Any]:
        return {
            "id": str(order.id),
            "buyer_id": str(order.buyer_id),
            "product_id": str(order.product_id),
            "price": order.amount,
            "status": order.status,
            "created_at": order.created_at,
            "next_billing_at": order.next_billing_at,
            "ended_at": order.ended_at,
            "deliverables": order.allocated(),
            "affiliate_referrer_id": str(order.affiliate_referrer_id) if order.affiliate_referrer_id else None,
            "affiliate_commission": order.commission,
            "payment_transaction_id": order.payment_transaction_id,
        }

    @classmethod
    def from_order(cls, order: Order) -> "OrderView":
        return cls(**cls.fields_of(order))


class OrderResponse(BaseModel):
    order: OrderView


class OrderDetail(OrderView):
    """An order joined with the product it bought."""

    product: ProductView | None = None


class OrderListResponse(BaseModel):
    orders: list[OrderDetail]
