"""Runtime settings read from the environment."""

import os
from dataclasses import dataclass


def current_env() -> str:
    return (os.getenv("MARKETPLACE_ENV") or os.getenv("ENV") or os.getenv("ENVIRONMENT") or "development").lower()


@dataclass(frozen=True)
class Settings:
    env: str = "development"
    log_level: str | None = None
    log_dir: str | None = None
    password_hash_rounds: int = 100_000
    referral_code_bytes: int = 6
    session_token_bytes: int = 24
    default_affiliate_percent: int = 5

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            env=current_env(),
            log_level=os.getenv("LOG_LEVEL"),
            log_dir=os.getenv("LOG_DIR"),
            password_hash_rounds=int(os.getenv("PASSWORD_HASH_ROUNDS", "100000")),
            referral_code_bytes=int(os.getenv("REFERRAL_CODE_BYTES", "6")),
            session_token_bytes=int(os.getenv("SESSION_TOKEN_BYTES", "24")),
            default_affiliate_percent=int(os.getenv("DEFAULT_AFFILIATE_PERCENT", "5")),
        )
