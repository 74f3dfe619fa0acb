"""Bearer-token authentication for FastAPI routes."""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from identity.context import RequestContext
from shared.api import get_marketplace

bearer_scheme = HTTPBearer(auto_error=False)


async def current_context(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    marketplace=Depends(get_marketplace),
) -> RequestContext:
    """Resolve the bearer token into the caller's RequestContext (401 if it does not resolve)."""
    token = credentials.credentials if credentials else None
    return marketplace.identity.authenticate(token)
