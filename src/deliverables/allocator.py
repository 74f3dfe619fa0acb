"""Deliverable Allocator: hands out one license key per pool per order.

Every pool mutation happens under an exclusive lock scoped to the product,
so concurrent checkouts of the same product never receive the same key and
never see a partially drained pool. Availability of every pool is checked
before any key is taken: an allocation either takes one key from each pool
or takes nothing.
"""

import threading
from typing import Any

import structlog
from protean.utils.globals import current_domain

from catalog.product import Product
from shared.errors import ResourceExhausted

logger = structlog.get_logger(__name__)

LICENSE_KEY = "license_key"


class DeliverableAllocator:
    def __init__(self) -> None:
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def lock_for(self, product_id: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(product_id, threading.Lock())

    def allocate(self, product_id: str) -> list[dict[str, Any]]:
        """Turn the product's deliverable specs into concrete deliverables.

        License-key pools yield ``{"kind": "license_key", "key": ...}``; all
        other specs pass through unchanged for the granting collaborator.
        """
        repo = current_domain.repository_for(Product)
        with self.lock_for(product_id):
            product = repo.get(product_id)

            empty = [pool.position for pool in product.pools() if not pool.available_keys]
            if empty:
                logger.warning("License key pool exhausted", product_id=product_id, positions=empty)
                raise ResourceExhausted({"deliverables": [f"No license keys left for product {product_id}"]})

            allocated: list[dict[str, Any]] = []
            for deliverable in product.specs():
                if deliverable.is_pool:
                    allocated.append({"kind": LICENSE_KEY, "key": deliverable.take_key()})
                else:
                    allocated.append(deliverable.spec())

            if product.pools():
                repo.add(product)
                logger.debug(
                    "License keys allocated",
                    product_id=product_id,
                    remaining=self._counts(product),
                )
            return allocated

    def release(self, product_id: str, allocated: list[dict[str, Any]]) -> None:
        """Return keys from an abandoned allocation to the front of their pools."""
        keys = [item["key"] for item in allocated if item.get("kind") == LICENSE_KEY]
        if not keys:
            return

        repo = current_domain.repository_for(Product)
        with self.lock_for(product_id):
            product = repo.find(product_id)
            if product is None:
                return
            for pool, key in zip(product.pools(), keys, strict=False):
                pool.return_key(key)
            repo.add(product)
            logger.info("License keys released", product_id=product_id, count=len(keys))

    def remaining(self, product_id: str) -> list[int]:
        """Keys left in each pool of the product, in deliverable order."""
        return self._counts(current_domain.repository_for(Product).get(product_id))

    @staticmethod
    def _counts(product: Product) -> list[int]:
        return [len(pool.available_keys) for pool in product.pools()]
