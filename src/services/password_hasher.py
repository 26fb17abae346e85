"""bcrypt password hashing.

Plaintext secrets never leave this module in any form other than a salted hash.
"""

import bcrypt

from domain.model.errors import ValidationError

BCRYPT_ROUNDS = 10

# bcrypt only looks at the first 72 bytes of the secret
BCRYPT_MAX_BYTES = 72

PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 100


def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Hash password using bcrypt with a fresh random salt.

    Args:
        password: Plain text password
        rounds: bcrypt work factor (log2 of iterations)

    Returns:
        Bcrypt hashed password as string
    """
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Check a candidate password against a stored bcrypt hash.

    Returns False on mismatch. A candidate bcrypt cannot hash (over 72 bytes)
    can never have produced a stored hash, so it is a mismatch too.
    """
    candidate = plain.encode("utf-8")
    if len(candidate) > BCRYPT_MAX_BYTES:
        return False
    return bcrypt.checkpw(candidate, hashed.encode("utf-8"))


def validate_password(password: str) -> None:
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
    if len(password) > PASSWORD_MAX_LENGTH:
        raise ValidationError(f"Password must be at most {PASSWORD_MAX_LENGTH} characters")
    if len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
        raise ValidationError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes")


def prepare_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Validate and hash a new secret before it is written to the store.

    Every write that sets a password goes through here, so a stored hash is
    always freshly salted and never reused.

    Raises:
        ValidationError: password does not meet length requirements
    """
    validate_password(password)
    return hash_password(password, rounds)
