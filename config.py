from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Base directory of the project
BASE_DIR = Path(__file__).resolve().parent

# SQLite database location used when no URL is configured
DEFAULT_DATABASE_URL = f"sqlite:///{BASE_DIR / 'accounts.db'}"

# Token settings. Issued tokens are valid for one hour.
DEFAULT_JWT_ALGORITHM = "HS256"
DEFAULT_TOKEN_ISSUER = "evermos"
DEFAULT_TOKEN_TTL_SECONDS = 3600

# Password hashing work factor (passlib pbkdf2_sha256 rounds).
# Higher value => slower hashing and verification.
DEFAULT_PASSWORD_HASH_ROUNDS = 290000

DEV_JWT_SECRET = "change-me-jwt-secret"


class Settings(BaseSettings):
    """
    Immutable runtime configuration.

    Read from ``ACCOUNT_*`` environment variables (or a ``.env`` file),
    built once at startup and handed to every component that needs it.
    Example: ACCOUNT_JWT_SECRET=s3cret
    """

    database_url: str = DEFAULT_DATABASE_URL
    jwt_secret: str = DEV_JWT_SECRET
    jwt_algorithm: str = DEFAULT_JWT_ALGORITHM
    token_issuer: str = DEFAULT_TOKEN_ISSUER
    token_ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS
    password_hash_rounds: int = DEFAULT_PASSWORD_HASH_ROUNDS
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="ACCOUNT_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
        str_strip_whitespace=True,
        frozen=True,
    )

    @field_validator("token_ttl_seconds", "password_hash_rounds")
    @classmethod
    def _must_be_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be positive")
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper()
