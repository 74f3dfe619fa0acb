"""Repository base for every marketplace aggregate.

The memory provider is not safe for concurrent writers, so all reads and
writes through these repositories hold one process-wide lock. A service that
checks a uniqueness rule and then adds a record holds ``store_lock`` across
both steps, which turns the pair into one atomic check-and-insert.
"""

import threading

from protean.core.repository import BaseRepository
from protean.exceptions import ObjectNotFoundError

store_lock = threading.RLock()


class MarketplaceRepository(BaseRepository):
    def add(self, item):
        with store_lock:
            return super().add(item)

    def get(self, identifier):
        name = self.meta_.part_of.__name__
        with store_lock:
            try:
                return self.loaded(super().get(identifier))
            except ObjectNotFoundError:
                raise ObjectNotFoundError({name.lower(): [f"{name} not found"]}) from None

    def find(self, identifier):
        """Like ``get`` but answers ``None`` for an unknown identifier."""
        with store_lock:
            try:
                return self.loaded(super().get(identifier))
            except ObjectNotFoundError:
                return None

    def filter_by(self, **filters) -> list:
        with store_lock:
            return [self.loaded(item) for item in self._dao.query.filter(**filters).all().items]

    def first_by(self, **filters):
        matches = self.filter_by(**filters)
        return matches[0] if matches else None

    def remove(self, item) -> None:
        with store_lock:
            self._dao.delete(item)

    def loaded(self, item):
        """Hook for aggregates whose associations load lazily; runs under the lock."""
        return item
