"""Bearer-token authentication dependency for protected routes."""

import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from api.dependencies import get_token_issuer
from domain.model.errors import AuthenticationError
from domain.model.token import TokenClaims, TokenType
from services.token_service import TokenIssuer

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_current_claims(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> TokenClaims:
    """Verify the access token and expose its claims (required).

    The decoded claims are also stored on ``request.state.user`` for
    downstream handlers and middleware.

    Raises:
        AuthenticationError: header missing or not a Bearer credential (reason ``missing_token``)
        TokenExpiredError: access token has expired (reason ``token_expired``)
        TokenInvalidError: signature, format or token type is wrong (reason ``token_invalid``)
    """
    if not credentials:
        raise AuthenticationError("Not authenticated", reason="missing_token")

    try:
        claims = issuer.verify(credentials.credentials, TokenType.ACCESS)
    except AuthenticationError as e:
        logger.debug("Rejected bearer token", extra={"path": request.url.path, "reason": e.reason})
        raise

    request.state.user = claims
    return claims
