"""Affiliates domain API package."""

from affiliates.api.routes import router

__all__ = ["router"]
