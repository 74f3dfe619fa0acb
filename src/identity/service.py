"""Identity & session operations: register, login, authenticate, logout."""

import secrets
from typing import Protocol

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from identity.context import RequestContext
from identity.credentials import CredentialVerifier
from identity.session import SessionStore
from identity.user import User, normalize_email
from shared.errors import Conflict, InvalidCredentials, Unauthenticated
from shared.repository import store_lock

logger = structlog.get_logger(__name__)

_REFERRAL_CODE_ATTEMPTS = 5


class ReferralRecorder(Protocol):
    def __call__(self, referrer_id: str, referred_id: str, source: str) -> object: ...


class IdentityService:
    def __init__(
        self,
        sessions: SessionStore,
        verifier: CredentialVerifier,
        referral_code_bytes: int = 6,
    ) -> None:
        self.sessions = sessions
        self.verifier = verifier
        self.referral_code_bytes = referral_code_bytes
        self.referral_recorder: ReferralRecorder | None = None

    # -------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------
    def register(
        self,
        email: str | None,
        password: str | None,
        name: str | None,
        is_seller: bool = False,
        referral_code: str | None = None,
    ) -> tuple[str, dict]:
        """Create an account, log it in, and credit the referrer if the code is valid."""
        missing = {
            field: [f"{field.capitalize()} is required"]
            for field, value in (("email", email), ("password", password), ("name", name))
            if not value
        }
        if missing:
            raise ValidationError(missing)

        try:
            email = normalize_email(email)
        except ValueError as exc:
            raise ValidationError({"email": [str(exc)]}) from None

        credential_hash = self.verifier.hash(password)
        user = self._add_user(email, credential_hash, name, bool(is_seller))

        if referral_code:
            referrer = self.find_by_referral_code(referral_code)
            if referrer is not None and referrer.id != user.id and self.referral_recorder is not None:
                self.referral_recorder(str(referrer.id), str(user.id), "registration")

        token = self.sessions.issue(str(user.id))
        logger.info("User registered", user_id=str(user.id), is_seller=user.is_seller)
        return token, user.summary()

    def _add_user(self, email: str, credential_hash: str, name: str, is_seller: bool) -> User:
        """Check email and referral-code uniqueness and add the user in one critical section."""
        repo = current_domain.repository_for(User)
        with store_lock:
            if repo.find_by_email(email) is not None:
                raise Conflict({"email": ["User with this email already exists"]})

            for _ in range(_REFERRAL_CODE_ATTEMPTS):
                code = secrets.token_urlsafe(self.referral_code_bytes)
                if repo.find_by_referral_code(code) is None:
                    break
                logger.warning("Referral code collision, regenerating")
            else:
                raise Conflict({"referral_code": ["Could not allocate a unique referral code"]})

            user = User(
                email=email,
                credential_hash=credential_hash,
                name=name,
                is_seller=is_seller,
                referral_code=code,
            )
            repo.add(user)
        return user

    # -------------------------------------------------------------------
    # Sessions
    # -------------------------------------------------------------------
    def login(self, email: str | None, password: str | None) -> tuple[str, dict]:
        if not email or not password:
            raise ValidationError({"credentials": ["Email and password are required"]})

        user = current_domain.repository_for(User).find_by_email(email.strip().lower())
        stored_hash = user.credential_hash if user else None
        if not self.verifier.verify(password, stored_hash) or user is None:
            logger.info("Login rejected")
            raise InvalidCredentials({"credentials": ["Invalid email or password"]})

        token = self.sessions.issue(str(user.id))
        logger.info("User logged in", user_id=str(user.id))
        return token, user.summary()

    def authenticate(self, token: str | None) -> RequestContext:
        user_id = self.sessions.resolve(token)
        if user_id is None:
            raise Unauthenticated({"session": ["Invalid or missing session"]})
        user = current_domain.repository_for(User).find(user_id)
        if user is None:
            raise ObjectNotFoundError({"user": ["User not found"]})
        return RequestContext(user=user, token=token)

    def logout(self, token: str | None) -> None:
        self.sessions.revoke(token)

    # -------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------
    def find_by_referral_code(self, code: str | None) -> User | None:
        if not code:
            return None
        return current_domain.repository_for(User).find_by_referral_code(code)
