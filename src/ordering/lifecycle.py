"""Order Lifecycle & Billing Scheduler: checkout, cancellation, listing.

Checkout runs as one unit of work:

    1. resolve the product
    2. allocate deliverables (all pools or nothing)
    3. charge the locked-in price
    4. attribute the referral
    5. compute the next billing date
    6. persist the order
    7. record the referral behind the attribution

Any failure between steps 2 and 6 hands the allocated keys back to their
pools before the error propagates. Nothing is written for the referral until
the order exists, so an abandoned checkout consumes nothing.
"""

import json
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import uuid4

import structlog
from protean.exceptions import InvalidOperationError, ObjectNotFoundError
from protean.utils.globals import current_domain

from affiliates.ledger import AttributionLedger
from catalog.product import Product
from catalog.registry import CatalogRegistry
from deliverables.allocator import DeliverableAllocator
from identity.context import RequestContext
from ordering.billing import next_billing_at
from ordering.order import Order
from payments.gateway import PaymentGateway
from shared.errors import PaymentDeclined

logger = structlog.get_logger(__name__)

CURRENCY = "USD"


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class OrderWithProduct:
    """Read-side join of an order and the product it bought."""

    order: Order
    product: Product | None


class OrderLifecycle:
    def __init__(
        self,
        catalog: CatalogRegistry,
        allocator: DeliverableAllocator,
        ledger: AttributionLedger,
        gateway: PaymentGateway,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.catalog = catalog
        self.allocator = allocator
        self.ledger = ledger
        self.gateway = gateway
        self.clock = clock
        self._transition_lock = threading.Lock()

    # -------------------------------------------------------------------
    # Checkout
    # -------------------------------------------------------------------
    def checkout(self, ctx: RequestContext, product_id: str, referral_code: str | None = None) -> Order:
        product = self.catalog.get_product(product_id)
        product_id = str(product.id)
        order_id = str(uuid4())

        deliverables = self.allocator.allocate(product_id)
        try:
            charge = self.gateway.create_charge(
                amount=product.amount,
                currency=CURRENCY,
                customer_id=ctx.user_id,
                idempotency_key=order_id,
            )
            if not charge.success:
                raise PaymentDeclined({"payment": [charge.failure_reason or "Payment declined"]})

            attribution = self.ledger.attribute(ctx.user_id, referral_code, product)

            now = self.clock()
            order = Order(
                id=order_id,
                buyer_id=ctx.user_id,
                product_id=product_id,
                price=product.price,
                created_at=now,
                next_billing_at=next_billing_at(product, now),
                deliverables=json.dumps(deliverables),
                affiliate_referrer_id=attribution.referrer_id,
                affiliate_commission=float(attribution.commission),
                payment_transaction_id=charge.gateway_transaction_id,
            )
            current_domain.repository_for(Order).add(order)
        except Exception:
            self.allocator.release(product_id, deliverables)
            logger.warning("Checkout abandoned", order_id=order_id, product_id=product_id, **ctx.log_fields())
            raise

        self.ledger.confirm(attribution, ctx.user_id)

        logger.info(
            "Order placed",
            order_id=order_id,
            product_id=product_id,
            price=str(order.amount),
            referrer_id=order.affiliate_referrer_id,
            **ctx.log_fields(),
        )
        return order

    # -------------------------------------------------------------------
    # Cancellation
    # -------------------------------------------------------------------
    def cancel(self, ctx: RequestContext, order_id: str) -> Order:
        """Cancel a subscription order owned by the caller. Irreversible."""
        repo = current_domain.repository_for(Order)
        with self._transition_lock:
            order = repo.find(order_id)
            if order is None or str(order.buyer_id) != ctx.user_id:
                raise ObjectNotFoundError({"order": ["Order not found"]})

            product = current_domain.repository_for(Product).find(str(order.product_id))
            if product is None or not product.is_subscription:
                raise InvalidOperationError({"order": ["Only subscriptions can be cancelled"]})

            order.cancel(self.clock())
            repo.add(order)

        logger.info("Subscription cancelled", order_id=str(order.id), **ctx.log_fields())
        return order

    # -------------------------------------------------------------------
    # Listing
    # -------------------------------------------------------------------
    def list_for_user(self, ctx: RequestContext) -> list[OrderWithProduct]:
        products = current_domain.repository_for(Product)
        return [
            OrderWithProduct(order=order, product=products.find(str(order.product_id)))
            for order in current_domain.repository_for(Order).for_buyer(ctx.user_id)
        ]
