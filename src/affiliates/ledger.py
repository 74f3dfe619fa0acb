"""Affiliate Attribution Ledger: referral records and commissions.

Attribution is first-touch per (referrer, referred) pair: the first
registration or completed checkout that links two users records a referral,
later ones only earn commission. ``referral_count`` therefore counts people
referred, not attributed purchases.

A checkout attributes in two steps. ``attribute`` resolves the referrer and
commission without writing anything; ``confirm`` records the referral once
the order has been persisted, so an abandoned checkout leaves no trace.
"""

from dataclasses import dataclass
from decimal import Decimal

import structlog
from protean.utils.globals import current_domain

from affiliates.referral import AffiliateReferral, ReferralSource
from catalog.product import Product
from identity.service import IdentityService
from ordering.order import Order
from shared.money import ZERO, format_money, percent_of
from shared.repository import store_lock

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Attribution:
    referrer_id: str | None
    commission: Decimal = ZERO


@dataclass(frozen=True)
class AffiliateStats:
    referral_count: int
    total_earnings: str


class AttributionLedger:
    def __init__(self, identity: IdentityService) -> None:
        self.identity = identity

    def attribute(self, buyer_id: str, referral_code: str | None, product: Product) -> Attribution:
        """Resolve a checkout's referral code into a referrer and commission.

        Unknown codes and self-referrals attribute nothing.
        """
        referrer = self.identity.find_by_referral_code(referral_code)
        if referrer is None:
            return Attribution(referrer_id=None)
        if str(referrer.id) == buyer_id:
            logger.info("Self-referral ignored", user_id=buyer_id, product_id=str(product.id))
            return Attribution(referrer_id=None)

        commission = percent_of(product.amount, product.affiliate_percent)
        return Attribution(referrer_id=str(referrer.id), commission=commission)

    def confirm(self, attribution: Attribution, buyer_id: str) -> AffiliateReferral | None:
        """Record the referral behind a persisted checkout's attribution."""
        if attribution.referrer_id is None:
            return None
        return self.record_referral(attribution.referrer_id, buyer_id, ReferralSource.CHECKOUT)

    def record_referral(
        self, referrer_id: str, referred_id: str, source: ReferralSource | str
    ) -> AffiliateReferral | None:
        """Record that ``referrer_id`` referred ``referred_id``; repeats are no-ops."""
        if referrer_id == referred_id:
            return None
        source = ReferralSource(source)

        repo = current_domain.repository_for(AffiliateReferral)
        with store_lock:
            if repo.find_pair(referrer_id, referred_id) is not None:
                return None
            referral = AffiliateReferral(referrer_id=referrer_id, referred_user_id=referred_id, source=source.value)
            repo.add(referral)

        logger.info(
            "Referral recorded",
            referrer_id=referrer_id,
            referred_user_id=referred_id,
            source=source.value,
        )
        return referral

    def stats(self, user_id: str) -> AffiliateStats:
        referral_count = len(current_domain.repository_for(AffiliateReferral).by_referrer(user_id))
        earned = sum(
            (order.commission for order in current_domain.repository_for(Order).referred_by(user_id)),
            ZERO,
        )
        return AffiliateStats(referral_count=referral_count, total_earnings=format_money(earned))
