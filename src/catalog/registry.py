"""Catalog Registry: stores, products and who may change them."""

import json
from decimal import Decimal

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from catalog.product import BillingInterval, Deliverable, Product, ProductKind
from catalog.store import Store
from identity.context import RequestContext
from shared.errors import Conflict, Forbidden
from shared.money import to_money
from shared.repository import store_lock

logger = structlog.get_logger(__name__)


class CatalogRegistry:
    def __init__(self, default_affiliate_percent: int = 5) -> None:
        self.default_affiliate_percent = default_affiliate_percent

    # -------------------------------------------------------------------
    # Stores
    # -------------------------------------------------------------------
    def create_store(
        self,
        ctx: RequestContext,
        name: str | None,
        category: str | None,
        description: str | None = None,
        banner_image: str | None = None,
    ) -> Store:
        if not name or not category:
            raise ValidationError({"store": ["Name and category are required"]})

        store = Store(
            owner_id=ctx.user_id,
            name=name,
            category=category,
            description=description or "",
            banner_image=banner_image or "",
        )

        repo = current_domain.repository_for(Store)
        with store_lock:
            if repo.find_by_owner(ctx.user_id) is not None:
                raise Conflict({"store": ["User already has a store"]})
            repo.add(store)

        logger.info("Store created", store_id=str(store.id), **ctx.log_fields())
        return store

    def update_store(
        self,
        ctx: RequestContext,
        store_id: str,
        name: str | None = None,
        description: str | None = None,
        category: str | None = None,
        banner_image: str | None = None,
    ) -> Store:
        repo = current_domain.repository_for(Store)
        store = repo.get(store_id)
        if str(store.owner_id) != ctx.user_id:
            raise Forbidden({"store": ["You are not the owner of this store"]})

        store.apply_update(name=name, description=description, category=category, banner_image=banner_image)
        repo.add(store)

        logger.info("Store updated", store_id=str(store.id), **ctx.log_fields())
        return store

    def get_store(self, store_id: str) -> Store:
        return current_domain.repository_for(Store).get(store_id)

    # -------------------------------------------------------------------
    # Products
    # -------------------------------------------------------------------
    def create_product(
        self,
        ctx: RequestContext,
        store_id: str,
        title: str | None,
        price: Decimal | float | str | None,
        kind: str | None,
        description: str | None = None,
        billing_interval: str | None = None,
        trial_days: int | None = None,
        deliverables: list[dict] | None = None,
        affiliate_percent: Decimal | float | int | None = None,
    ) -> Product:
        """Add a product to a store owned by the caller.

        Billing terms are normalized to the product kind: subscriptions
        default to monthly billing, one-time products drop any interval or
        trial length they were given. A zero trial counts as no trial.
        """
        store = self.get_store(store_id)
        if str(store.owner_id) != ctx.user_id:
            raise Forbidden({"store": ["You do not own this store"]})

        if not title or price is None or price == "" or not kind:
            raise ValidationError({"product": ["Title, price and kind are required"]})

        try:
            price = to_money(price)
        except ValueError as exc:
            raise ValidationError({"price": [str(exc)]}) from None

        if kind == ProductKind.SUBSCRIPTION.value:
            billing_interval = billing_interval or BillingInterval.MONTHLY.value
            trial_days = trial_days or None
        else:
            billing_interval = None
            trial_days = None

        product = Product(
            store_id=str(store.id),
            title=title,
            description=description or "",
            price=float(price),
            kind=kind,
            billing_interval=billing_interval,
            trial_days=trial_days,
            deliverables=self._deliverables_from(deliverables or []),
            affiliate_percent=float(
                self.default_affiliate_percent if affiliate_percent is None else affiliate_percent
            ),
        )
        current_domain.repository_for(Product).add(product)

        logger.info(
            "Product created",
            product_id=str(product.id),
            store_id=str(store.id),
            kind=product.kind,
            **ctx.log_fields(),
        )
        return product

    @staticmethod
    def _deliverables_from(specs: list[dict]) -> list[Deliverable]:
        deliverables = []
        for position, spec in enumerate(specs):
            if not isinstance(spec, dict):
                raise ValidationError({"deliverables": ["Each deliverable must be an object with a kind"]})
            details = spec.get("details") or {}
            if not isinstance(details, dict):
                raise ValidationError({"deliverables": ["Deliverable details must be an object"]})
            deliverables.append(Deliverable(position=position, kind=spec.get("kind"), details=json.dumps(details)))
        return deliverables

    def get_product(self, product_id: str) -> Product:
        return current_domain.repository_for(Product).get(product_id)

    def products_for_store(self, store_id: str) -> list[Product]:
        """The store's products, oldest first. An unknown store raises ObjectNotFoundError."""
        store = self.get_store(store_id)
        return current_domain.repository_for(Product).for_store(str(store.id))
