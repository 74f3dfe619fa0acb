"""User aggregate and email validation."""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, String

from shared.domain import domain
from shared.repository import MarketplaceRepository

_FORBIDDEN_EMAIL_CHARS = (";", ",", "(", ")", '"', ":", "<", ">", "[", "]", "\\")


def normalize_email(email: str) -> str:
    """Validate the structure of an email address and return it lower-cased."""
    email = (email or "").strip()

    if any(ch.isspace() for ch in email):
        raise ValueError(f"Invalid email address: {email!r}")

    if email.count("@") != 1:
        raise ValueError(f"Invalid email address: {email!r}")

    local_part, domain_part = email.split("@", 1)

    if not local_part or local_part.startswith(".") or local_part.endswith("."):
        raise ValueError(f"Invalid email address: {email!r}")

    if not domain_part or domain_part.startswith(".") or domain_part.endswith("."):
        raise ValueError(f"Invalid email address: {email!r}")

    if "." not in domain_part:
        raise ValueError(f"Invalid email address: {email!r}")

    for label in domain_part.split("."):
        if label.startswith("-") or label.endswith("-"):
            raise ValueError(f"Invalid email address: {email!r}")

    if ".." in local_part or ".." in domain_part:
        raise ValueError(f"Invalid email address: {email!r}")

    if any(forbidden in email for forbidden in _FORBIDDEN_EMAIL_CHARS):
        raise ValueError(f"Invalid email address: {email!r}")

    return email.lower()


@domain.aggregate
class User:
    """A registered marketplace account, buyer and possibly seller."""

    email: String(required=True, max_length=254)
    credential_hash: String(required=True, max_length=512)
    name: String(required=True, max_length=255)
    is_seller: Boolean(default=False)
    referral_code: String(required=True, max_length=64)
    created_at: DateTime(default=lambda: datetime.now(UTC))

    @invariant.post
    def email_must_be_normalized(self):
        try:
            normalized = normalize_email(self.email)
        except ValueError as exc:
            raise ValidationError({"email": [str(exc)]}) from None
        if normalized != self.email:
            raise ValidationError({"email": ["Email must be stored lower-cased and trimmed"]})

    def summary(self) -> dict:
        """Public view of the user: everything except the credential hash."""
        return {
            "id": str(self.id),
            "email": self.email,
            "name": self.name,
            "is_seller": self.is_seller,
            "referral_code": self.referral_code,
        }


@domain.repository(part_of=User)
class UserRepository(MarketplaceRepository):
    def find_by_email(self, email: str) -> User | None:
        return self.first_by(email=email)

    def find_by_referral_code(self, code: str) -> User | None:
        return self.first_by(referral_code=code)
