"""Order aggregate and its state machine.

State Machine (3 states):
    ACTIVE → CANCELLED   explicit cancellation, subscriptions only
    ACTIVE → EXPIRED     time-driven billing failure (no scheduler drives it yet)

CANCELLED and EXPIRED are terminal. There is no pending state: payment
is taken at checkout, so an order is born active.
"""

import json
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from protean.exceptions import InvalidOperationError
from protean.fields import DateTime, Float, Identifier, String, Text

from shared.domain import domain
from shared.money import to_money
from shared.repository import MarketplaceRepository


class OrderStatus(Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


_VALID_TRANSITIONS = {
    OrderStatus.ACTIVE: {OrderStatus.CANCELLED, OrderStatus.EXPIRED},
    OrderStatus.CANCELLED: set(),  # Terminal
    OrderStatus.EXPIRED: set(),  # Terminal
}


@domain.aggregate
class Order:
    buyer_id: Identifier(required=True)
    product_id: Identifier(required=True)
    price: Float(required=True, min_value=0.0)
    status: String(choices=OrderStatus, default=OrderStatus.ACTIVE.value)
    created_at: DateTime(default=lambda: datetime.now(UTC))
    next_billing_at: DateTime()
    ended_at: DateTime()
    deliverables: Text(default="[]")  # JSON array of allocated deliverables
    affiliate_referrer_id: Identifier()
    affiliate_commission: Float(default=0.0, min_value=0.0)
    payment_transaction_id: String(max_length=255)

    @property
    def amount(self) -> Decimal:
        return to_money(self.price)

    @property
    def commission(self) -> Decimal:
        return to_money(self.affiliate_commission or 0)

    def allocated(self) -> list[dict[str, Any]]:
        return json.loads(self.deliverables or "[]")

    def _assert_can_transition(self, target_status: OrderStatus) -> None:
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS[current]:
            raise InvalidOperationError(
                {"status": [f"Cannot transition from {current.value} to {target_status.value}"]}
            )

    def cancel(self, now: datetime) -> None:
        """End the order immediately and stop billing it."""
        self._assert_can_transition(OrderStatus.CANCELLED)
        self.status = OrderStatus.CANCELLED.value
        self.ended_at = now
        self.next_billing_at = None

    def expire(self, now: datetime) -> None:
        self._assert_can_transition(OrderStatus.EXPIRED)
        self.status = OrderStatus.EXPIRED.value
        self.ended_at = now
        self.next_billing_at = None


@domain.repository(part_of=Order)
class OrderRepository(MarketplaceRepository):
    def for_buyer(self, buyer_id: str) -> list[Order]:
        return sorted(self.filter_by(buyer_id=buyer_id), key=lambda order: order.created_at)

    def referred_by(self, referrer_id: str) -> list[Order]:
        return self.filter_by(affiliate_referrer_id=referrer_id)
