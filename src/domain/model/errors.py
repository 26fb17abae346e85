"""Domain-level exceptions.

Services raise these errors to express business rule violations.
Route handlers let them propagate; ``api.errors`` maps them to HTTP status codes.
"""


class DomainError(Exception):
    """Base class for all domain errors."""


class NotFoundError(DomainError):
    """Requested entity does not exist."""


class DuplicateError(DomainError):
    """Entity with the same unique key already exists."""


class ValidationError(DomainError):
    """Input violates a business validation rule."""


class InvalidCredentialsError(DomainError):
    """Identifier or password did not match.

    The message is the same for an unknown user and a wrong password.
    """

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)


class AuthenticationError(DomainError):
    """Request could not be authenticated.

    ``reason`` is a machine-readable discriminator clients use to decide
    between refreshing the access token and forcing a new login.
    """

    reason = "unauthorized"

    def __init__(self, message: str = "Not authenticated", reason: str | None = None):
        super().__init__(message)
        if reason is not None:
            self.reason = reason


class TokenExpiredError(AuthenticationError):
    """Token signature is valid but its expiry has passed."""

    reason = "token_expired"

    def __init__(self, message: str = "Token has expired"):
        super().__init__(message)


class TokenInvalidError(AuthenticationError):
    """Token is malformed, tampered with, or of the wrong type."""

    reason = "token_invalid"

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message)
