"""Auth service: registration, login, profile, logout, refresh and password change.

Pure business logic with no HTTP dependencies.
Raises domain errors that route handlers map to HTTP status codes.
"""

import logging
import re
from functools import lru_cache

from domain.model.errors import (
    DuplicateError,
    InvalidCredentialsError,
    NotFoundError,
    TokenInvalidError,
    ValidationError,
)
from domain.model.token import TokenPair, TokenType
from domain.model.user import NewUser, User
from port.user_repository import UserRepository
from services.password_hasher import BCRYPT_ROUNDS, hash_password, prepare_password, verify_password
from services.token_service import TokenIssuer

logger = logging.getLogger(__name__)

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 50

_USERNAME_RE = re.compile(r"^[A-Za-z0-9_.-]+$")
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    # Verified against when the user is unknown so both failure paths cost one bcrypt check
    return hash_password("nexus-dummy-password")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _validate_username(username: str) -> None:
    if not USERNAME_MIN_LENGTH <= len(username) <= USERNAME_MAX_LENGTH:
        raise ValidationError(
            f"Username must be between {USERNAME_MIN_LENGTH} and {USERNAME_MAX_LENGTH} characters"
        )
    if not _USERNAME_RE.match(username):
        raise ValidationError("Username may only contain letters, numbers, '.', '_' and '-'")


def _validate_email(email: str) -> None:
    if not _EMAIL_RE.match(email):
        raise ValidationError("Email must be a valid email address")


def register(
    repo: UserRepository,
    issuer: TokenIssuer,
    username: str,
    email: str,
    password: str,
    first_name: str | None = None,
    last_name: str | None = None,
    rounds: int = BCRYPT_ROUNDS,
) -> tuple[User, TokenPair]:
    """Register a new user and issue its first token pair.

    The lookups below only give a friendlier message; the store's unique
    constraint is what rejects a concurrent duplicate.

    Raises:
        ValidationError: malformed username, email or password
        DuplicateError: username or email already registered
    """
    username = username.strip()
    email = normalize_email(email)
    _validate_username(username)
    _validate_email(email)

    if repo.get_by_email(email):
        raise DuplicateError("Email already registered")
    if repo.get_by_username(username):
        raise DuplicateError("Username already taken")

    password_hash = prepare_password(password, rounds)
    user = repo.create(NewUser(
        username=username,
        email=email,
        password_hash=password_hash,
        first_name=first_name,
        last_name=last_name,
    ))

    logger.info("User registered", extra={"userId": user.id, "username": user.username})
    return user, issuer.issue_pair(user)


def _find_by_identifier(repo: UserRepository, identifier: str) -> User | None:
    identifier = identifier.strip()
    if "@" in identifier:
        return repo.get_by_email(normalize_email(identifier))
    return repo.get_by_username(identifier)


def authenticate(
    repo: UserRepository,
    issuer: TokenIssuer,
    identifier: str,
    password: str,
) -> tuple[User, TokenPair]:
    """Authenticate by email or username and password.

    Unknown user and wrong password raise the same error with the same message.

    Raises:
        InvalidCredentialsError: invalid credentials (deliberately vague)
    """
    user = _find_by_identifier(repo, identifier)
    if user is None:
        verify_password(password, _dummy_hash())
        logger.info("Login failed", extra={"reason": "unknown_user"})
        raise InvalidCredentialsError()

    if not verify_password(password, user.password_hash):
        logger.info("Login failed", extra={"userId": user.id, "reason": "wrong_password"})
        raise InvalidCredentialsError()

    logger.info("User logged in", extra={"userId": user.id})
    return user, issuer.issue_pair(user)


def get_profile(repo: UserRepository, user_id: str) -> User:
    """Return the user an authenticated request belongs to.

    Raises:
        NotFoundError: the token's subject no longer exists
    """
    user = repo.get_by_id(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def logout(user_id: str) -> None:
    """Acknowledge a logout.

    Tokens are stateless and there is no revocation list, so they stay valid
    until they expire; the client is expected to discard them.
    """
    logger.info("User logged out", extra={"userId": user_id})


def refresh(repo: UserRepository, issuer: TokenIssuer, refresh_token: str) -> TokenPair:
    """Exchange a refresh token for a new access token and a rotated refresh token.

    Raises:
        TokenExpiredError: refresh token has expired
        TokenInvalidError: refresh token is invalid or its user no longer exists
    """
    claims = issuer.verify(refresh_token, TokenType.REFRESH)

    user = repo.get_by_id(claims.user_id)
    if user is None:
        raise TokenInvalidError("Invalid refresh token")

    logger.info("Token refreshed", extra={"userId": user.id})
    return issuer.issue_pair(user)


def change_password(
    repo: UserRepository,
    user_id: str,
    current_password: str,
    new_password: str,
    rounds: int = BCRYPT_ROUNDS,
) -> User:
    """Replace a user's password after checking the current one.

    Raises:
        NotFoundError: user no longer exists
        InvalidCredentialsError: current password is wrong
        ValidationError: new password does not meet length requirements
    """
    user = get_profile(repo, user_id)
    if not verify_password(current_password, user.password_hash):
        raise InvalidCredentialsError()

    updated = repo.update_password(user.id, prepare_password(new_password, rounds))
    if updated is None:
        raise NotFoundError("User not found")

    logger.info("Password changed", extra={"userId": user.id})
    return updated
