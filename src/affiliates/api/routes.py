"""FastAPI endpoints for affiliate stats."""

from fastapi import APIRouter, Depends

from affiliates.api.schemas import AffiliateStatsResponse
from identity.api.dependencies import current_context
from identity.context import RequestContext
from shared.api import get_marketplace

router = APIRouter(prefix="/affiliates", tags=["affiliates"])


@router.get("/stats", response_model=AffiliateStatsResponse)
async def affiliate_stats(
    ctx: RequestContext = Depends(current_context),
    marketplace=Depends(get_marketplace),
) -> AffiliateStatsResponse:
    stats = marketplace.ledger.stats(ctx.user_id)
    return AffiliateStatsResponse(referrals=stats.referral_count, earnings=stats.total_earnings)
