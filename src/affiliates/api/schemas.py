"""Pydantic response schemas for the Affiliates API."""

from pydantic import BaseModel


class AffiliateStatsResponse(BaseModel):
    referrals: int
    earnings: str
