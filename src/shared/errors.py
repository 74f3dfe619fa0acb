"""Error taxonomy shared by every marketplace component.

Invalid input, missing records and forbidden state changes are protean's own
``ValidationError``, ``ObjectNotFoundError`` and ``InvalidOperationError``.
The failures protean has no word for live here. Every error carries a
``messages`` dict (field name → list of messages); ``error_response`` turns
any of them into the status code and body the API answers with.
"""

from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError


class MarketplaceError(Exception):
    """Base class for domain failures outside protean's exception set."""

    code = "error"
    status_code = 400

    def __init__(self, messages: dict[str, list[str]] | str | None = None) -> None:
        if messages is None:
            messages = {"_entity": [self.__class__.__name__]}
        elif isinstance(messages, str):
            messages = {"_entity": [messages]}
        self.messages = messages
        super().__init__(messages)


class InvalidCredentials(MarketplaceError):
    code = "invalid_credentials"
    status_code = 400


class Unauthenticated(MarketplaceError):
    code = "unauthenticated"
    status_code = 401


class PaymentDeclined(MarketplaceError):
    code = "payment_declined"
    status_code = 402


class Forbidden(MarketplaceError):
    code = "forbidden"
    status_code = 403


class Conflict(MarketplaceError):
    code = "conflict"
    status_code = 409


class ResourceExhausted(MarketplaceError):
    code = "resource_exhausted"
    status_code = 409


# protean exception → (error code, HTTP status)
PROTEAN_ERRORS = {
    ValidationError: ("invalid_argument", 400),
    ObjectNotFoundError: ("not_found", 404),
    InvalidOperationError: ("invalid_operation", 400),
}


def messages_of(exc: Exception) -> dict[str, list[str]]:
    messages = getattr(exc, "messages", None)
    if isinstance(messages, dict):
        return messages
    return {"_entity": [str(messages or exc)]}


def error_response(exc: Exception) -> tuple[int, dict]:
    """Status code and JSON body for a domain failure."""
    if isinstance(exc, MarketplaceError):
        return exc.status_code, {"error": exc.code, "messages": exc.messages}
    for exc_type, (code, status_code) in PROTEAN_ERRORS.items():
        if isinstance(exc, exc_type):
            return status_code, {"error": code, "messages": messages_of(exc)}
    raise TypeError(f"Not a domain failure: {exc!r}")
