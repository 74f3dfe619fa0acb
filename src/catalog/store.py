"""Store aggregate: a seller's storefront, at most one per owner."""

from datetime import UTC, datetime

from protean.fields import DateTime, Identifier, String, Text

from shared.domain import domain
from shared.repository import MarketplaceRepository


@domain.aggregate
class Store:
    owner_id: Identifier(required=True)
    name: String(required=True, max_length=255)
    description: Text(default="")
    category: String(required=True, max_length=100)
    banner_image: String(max_length=2048, default="")
    created_at: DateTime(default=lambda: datetime.now(UTC))
    updated_at: DateTime()

    def apply_update(self, **fields) -> None:
        """Overwrite the given fields; empty values keep the current ones."""
        for name, value in fields.items():
            if value:
                setattr(self, name, value)
        self.updated_at = datetime.now(UTC)


@domain.repository(part_of=Store)
class StoreRepository(MarketplaceRepository):
    def find_by_owner(self, owner_id: str) -> Store | None:
        return self.first_by(owner_id=owner_id)
