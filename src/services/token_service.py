"""JWT issuing and verification for access and refresh tokens.

Access and refresh tokens are signed with different secrets and carry a
``type`` claim. Verification checks both, so neither kind can stand in for
the other.
"""

import logging
from datetime import datetime, timezone

from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTError

from utils.config import AuthSettings
from domain.model.errors import TokenExpiredError, TokenInvalidError
from domain.model.token import TokenClaims, TokenPair, TokenType
from domain.model.user import User

logger = logging.getLogger(__name__)


def _timestamp_to_datetime(value) -> datetime | None:
    if value is None:
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


class TokenIssuer:
    def __init__(self, settings: AuthSettings):
        self.settings = settings

    def _secret_for(self, kind: TokenType) -> str:
        if kind is TokenType.REFRESH:
            return self.settings.jwt_refresh_secret
        return self.settings.jwt_secret

    def _sign(self, payload: dict, kind: TokenType) -> str:
        now = datetime.now(timezone.utc)
        ttl = self.settings.refresh_token_ttl if kind is TokenType.REFRESH else self.settings.access_token_ttl
        claims = {
            **payload,
            "type": kind.value,
            "iat": now,
            "exp": now + ttl,
        }
        return jwt.encode(claims, self._secret_for(kind), algorithm=self.settings.algorithm)

    def issue_access(self, user_id: str, email: str, role: str) -> str:
        """Create a signed access token carrying identity claims."""
        return self._sign({"sub": user_id, "email": email, "role": role}, TokenType.ACCESS)

    def issue_refresh(self, user_id: str) -> str:
        """Create a signed refresh token. Only the subject is embedded."""
        return self._sign({"sub": user_id}, TokenType.REFRESH)

    def issue_pair(self, user: User) -> TokenPair:
        return TokenPair(
            access_token=self.issue_access(user.id, user.email, user.role.value),
            refresh_token=self.issue_refresh(user.id),
        )

    def verify(self, token: str, kind: TokenType = TokenType.ACCESS) -> TokenClaims:
        """Verify signature, expiry and type of a token.

        Raises:
            TokenExpiredError: signature is valid but the token has expired
            TokenInvalidError: anything else (bad signature, malformed, wrong type)
        """
        try:
            payload = jwt.decode(token, self._secret_for(kind), algorithms=[self.settings.algorithm])
        except ExpiredSignatureError as e:
            raise TokenExpiredError() from e
        except JWTError as e:
            logger.debug(f"JWT verification failed: {e}")
            raise TokenInvalidError() from e

        # jose only rejects exp < now; a token is already expired at its exp second
        exp = payload.get("exp")
        if exp is not None and int(exp) <= int(datetime.now(timezone.utc).timestamp()):
            raise TokenExpiredError()

        user_id = payload.get("sub")
        if not user_id:
            raise TokenInvalidError("Token has no subject")
        if payload.get("type") != kind.value:
            raise TokenInvalidError(f"Expected a {kind.value} token")

        return TokenClaims(
            user_id=user_id,
            type=kind,
            expires_at=_timestamp_to_datetime(payload.get("exp")),
            issued_at=_timestamp_to_datetime(payload.get("iat")),
            email=payload.get("email"),
            role=payload.get("role"),
        )
