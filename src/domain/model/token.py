from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class TokenType(str, Enum):
    """Kinds of signed tokens. Stored in the ``type`` claim."""
    ACCESS = 'access'
    REFRESH = 'refresh'


@dataclass(frozen=True)
class TokenClaims:
    """Decoded identity claims of a verified token."""
    user_id: str
    type: TokenType
    expires_at: datetime
    issued_at: datetime | None = None
    email: str | None = None
    role: str | None = None


@dataclass(frozen=True)
class TokenPair:
    """Access and refresh token issued together."""
    access_token: str
    refresh_token: str
