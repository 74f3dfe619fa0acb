"""Request-scoped context passed explicitly to authenticated operations."""

from dataclasses import dataclass, field
from uuid import uuid4

from identity.user import User


@dataclass(frozen=True)
class RequestContext:
    """The authenticated caller plus request metadata.

    Built once per request by ``IdentityService.authenticate`` and handed to
    every operation that acts on behalf of a user.
    """

    user: User
    token: str
    request_id: str = field(default_factory=lambda: uuid4().hex)

    @property
    def user_id(self) -> str:
        return str(self.user.id)

    def log_fields(self) -> dict[str, str]:
        return {"request_id": self.request_id, "user_id": self.user_id}
