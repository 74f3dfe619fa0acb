"""Affiliate referral aggregate."""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Identifier, String

from shared.domain import domain
from shared.repository import MarketplaceRepository


class ReferralSource(Enum):
    REGISTRATION = "registration"
    CHECKOUT = "checkout"


@domain.aggregate
class AffiliateReferral:
    """``referrer_id`` brought ``referred_user_id`` to the marketplace."""

    referrer_id: Identifier(required=True)
    referred_user_id: Identifier(required=True)
    source: String(required=True, choices=ReferralSource)
    created_at: DateTime(default=lambda: datetime.now(UTC))


@domain.repository(part_of=AffiliateReferral)
class AffiliateReferralRepository(MarketplaceRepository):
    def find_pair(self, referrer_id: str, referred_user_id: str) -> AffiliateReferral | None:
        return self.first_by(referrer_id=referrer_id, referred_user_id=referred_user_id)

    def by_referrer(self, referrer_id: str) -> list[AffiliateReferral]:
        return self.filter_by(referrer_id=referrer_id)
