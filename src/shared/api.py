"""FastAPI plumbing shared by every router."""

from typing import TYPE_CHECKING

from fastapi import Request

if TYPE_CHECKING:
    from marketplace import Marketplace


def get_marketplace(request: Request) -> "Marketplace":
    """The Marketplace the running app was built with."""
    return request.app.state.marketplace
