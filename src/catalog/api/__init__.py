"""Catalog domain API package."""

from catalog.api.routes import product_router, store_router

__all__ = ["product_router", "store_router"]
