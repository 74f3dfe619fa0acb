"""Password hashing behind an explicit verifier capability.

The storage encoding of a credential hash belongs to passlib; callers only
ever ``hash`` and ``verify``.
"""

from passlib.context import CryptContext


class CredentialVerifier:
    """Salted, iterated PBKDF2-SHA512 derivation with a per-user random salt."""

    def __init__(self, rounds: int = 100_000) -> None:
        self._context = CryptContext(
            schemes=["pbkdf2_sha512"],
            deprecated="auto",
            pbkdf2_sha512__rounds=rounds,
        )

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, password: str, credential_hash: str | None) -> bool:
        """Check a password against a stored hash.

        With no stored hash a dummy derivation still runs, so an unknown
        account costs the same time as a wrong password.
        """
        if credential_hash is None:
            self._context.dummy_verify()
            return False
        return self._context.verify(password, credential_hash)
