"""Product aggregate with its deliverable specs and billing terms.

A product is either a one-time purchase or a subscription. Subscriptions
carry a billing interval and optionally a trial length; one-time products
carry neither.
"""

import json
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text

from shared.domain import domain
from shared.money import to_money
from shared.repository import MarketplaceRepository


class ProductKind(Enum):
    ONE_TIME = "one_time"
    SUBSCRIPTION = "subscription"


class BillingInterval(Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"


class DeliverableKind(Enum):
    FILE = "file"
    ROLE = "role"
    INVITE = "invite"
    LICENSE_KEYS = "license_keys"


@domain.entity(part_of="Product")
class Deliverable:
    """What a buyer receives. ``license_keys`` deliverables hold a finite pool of keys."""

    position: Integer(required=True, min_value=0)
    kind: String(required=True, choices=DeliverableKind)
    details: Text(default="{}")  # JSON object; a pool keeps its keys under "keys"

    @invariant.post
    def license_pool_must_be_a_list_of_keys(self):
        try:
            details = json.loads(self.details or "{}")
        except ValueError:
            raise ValidationError({"details": ["Deliverable details must be a JSON object"]}) from None
        if not isinstance(details, dict):
            raise ValidationError({"details": ["Deliverable details must be a JSON object"]})
        if self.kind != DeliverableKind.LICENSE_KEYS.value:
            return
        keys = details.get("keys", [])
        if not isinstance(keys, list) or not all(isinstance(key, str) and key for key in keys):
            raise ValidationError(
                {"deliverables": ["license_keys deliverables need details.keys as a list of non-empty strings"]}
            )

    @property
    def is_pool(self) -> bool:
        return self.kind == DeliverableKind.LICENSE_KEYS.value

    @property
    def detail_dict(self) -> dict:
        return json.loads(self.details or "{}")

    @property
    def available_keys(self) -> list[str]:
        return self.detail_dict.get("keys", []) if self.is_pool else []

    def take_key(self) -> str:
        """Remove and return the oldest key in the pool."""
        keys = self.available_keys
        key = keys.pop(0)
        self.details = json.dumps({**self.detail_dict, "keys": keys})
        return key

    def return_key(self, key: str) -> None:
        """Put a key back at the front of the pool."""
        self.details = json.dumps({**self.detail_dict, "keys": [key, *self.available_keys]})

    def spec(self) -> dict:
        return {"kind": self.kind, "details": self.detail_dict}

    def public_spec(self) -> dict:
        """Spec safe to show buyers: a pool reports how many keys are left, not the keys."""
        if self.is_pool:
            return {"kind": self.kind, "details": {"available": len(self.available_keys)}}
        return self.spec()


@domain.aggregate
class Product:
    store_id: Identifier(required=True)
    title: String(required=True, max_length=255)
    description: Text(default="")
    price: Float(required=True, min_value=0.0)
    kind: String(required=True, choices=ProductKind)
    billing_interval: String(choices=BillingInterval)
    trial_days: Integer(min_value=0)
    deliverables: HasMany(Deliverable)
    affiliate_percent: Float(default=5.0, min_value=0.0, max_value=100.0)
    created_at: DateTime(default=lambda: datetime.now(UTC))

    @invariant.post
    def billing_terms_match_kind(self):
        if self.kind == ProductKind.ONE_TIME.value:
            if self.billing_interval is not None or self.trial_days is not None:
                raise ValidationError(
                    {"billing_interval": ["One-time products cannot have a billing interval or trial days"]}
                )
        elif self.billing_interval is None:
            raise ValidationError({"billing_interval": ["Subscriptions need a billing interval"]})

    @property
    def amount(self) -> Decimal:
        """The price as a 2-place decimal."""
        return to_money(self.price)

    @property
    def is_subscription(self) -> bool:
        return self.kind == ProductKind.SUBSCRIPTION.value

    def specs(self) -> list[Deliverable]:
        """Deliverables in the order the seller listed them."""
        return sorted(self.deliverables, key=lambda deliverable: deliverable.position)

    def pools(self) -> list[Deliverable]:
        """Every license-key pool on the product, in deliverable order."""
        return [deliverable for deliverable in self.specs() if deliverable.is_pool]


@domain.repository(part_of=Product)
class ProductRepository(MarketplaceRepository):
    def loaded(self, item):
        # Pull the deliverables in while the lock is held
        item.deliverables  # noqa: B018
        return item

    def for_store(self, store_id: str) -> list[Product]:
        return sorted(self.filter_by(store_id=store_id), key=lambda product: product.created_at)
