"""Opaque session tokens bound to user ids."""

import secrets
from datetime import UTC, datetime

from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from shared.domain import domain
from shared.repository import MarketplaceRepository


@domain.aggregate
class Session:
    """A live login. The bearer token is the session's identity."""

    token: String(identifier=True, max_length=128)
    user_id: Identifier(required=True)
    created_at: DateTime(default=lambda: datetime.now(UTC))


@domain.repository(part_of=Session)
class SessionRepository(MarketplaceRepository):
    pass


class SessionStore:
    """Issues, resolves and revokes session tokens. Sessions never expire."""

    def __init__(self, token_bytes: int = 24) -> None:
        self._token_bytes = token_bytes

    def issue(self, user_id: str) -> str:
        session = Session(token=secrets.token_urlsafe(self._token_bytes), user_id=user_id)
        current_domain.repository_for(Session).add(session)
        return session.token

    def resolve(self, token: str | None) -> str | None:
        if not token:
            return None
        session = current_domain.repository_for(Session).find(token)
        return str(session.user_id) if session else None

    def revoke(self, token: str | None) -> None:
        if not token:
            return
        repo = current_domain.repository_for(Session)
        session = repo.find(token)
        if session is not None:
            repo.remove(session)
