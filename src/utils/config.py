"""Application configuration read from environment variables.

``load_dotenv()`` must run before ``Settings.from_env()`` for values in a
``.env`` file to be picked up (``api.main`` does this).
"""

import os
import logging
from dataclasses import dataclass, field
from datetime import timedelta

from utils.duration import parse_duration

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///./nexus.db"


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class AuthSettings:
    """Secrets and lifetimes for password hashing and token signing."""
    jwt_secret: str
    jwt_refresh_secret: str
    access_token_ttl: timedelta = timedelta(hours=24)
    refresh_token_ttl: timedelta = timedelta(days=7)
    algorithm: str = "HS256"
    bcrypt_rounds: int = 10


@dataclass(frozen=True)
class Settings:
    """Top-level settings passed to ``create_app``."""
    auth: AuthSettings
    environment: str = "development"
    host: str = "0.0.0.0"
    port: int = 5000
    cors_origins: list[str] | str = field(default_factory=lambda: ["http://localhost:3000"])
    database_url: str = DEFAULT_DATABASE_URL
    database_name: str = "nexus"
    database_echo: bool = False
    log_level: str = "INFO"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def uses_mongodb(self) -> bool:
        return self.database_url.startswith(("mongodb://", "mongodb+srv://"))

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment.

        Raises:
            ValueError: a required secret is missing or a value cannot be parsed
        """
        jwt_secret = os.getenv("JWT_SECRET")
        jwt_refresh_secret = os.getenv("JWT_REFRESH_SECRET")
        if not jwt_secret or not jwt_refresh_secret:
            raise ValueError(
                "JWT_SECRET and JWT_REFRESH_SECRET environment variables are required. "
                "Generate secure keys with: openssl rand -hex 32"
            )
        if jwt_secret == jwt_refresh_secret:
            logger.warning("JWT_SECRET and JWT_REFRESH_SECRET are identical; use distinct secrets")

        auth = AuthSettings(
            jwt_secret=jwt_secret,
            jwt_refresh_secret=jwt_refresh_secret,
            access_token_ttl=parse_duration(os.getenv("JWT_EXPIRE", "24h")),
            refresh_token_ttl=parse_duration(os.getenv("JWT_REFRESH_EXPIRE", "7d")),
            bcrypt_rounds=int(os.getenv("BCRYPT_ROUNDS", "10")),
        )

        # Wildcard stays a string, explicit origins become a list
        cors_origin_env = os.getenv("CORS_ORIGIN", "http://localhost:3000")
        if cors_origin_env.strip() == "*":
            cors_origins: list[str] | str = "*"
        else:
            cors_origins = [origin.strip() for origin in cors_origin_env.split(",") if origin.strip()]

        return cls(
            auth=auth,
            environment=os.getenv("APP_ENV") or os.getenv("NODE_ENV", "development"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "5000")),
            cors_origins=cors_origins,
            database_url=os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL),
            database_name=os.getenv("DATABASE_NAME", "nexus"),
            database_echo=_env_bool("DATABASE_ECHO"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
