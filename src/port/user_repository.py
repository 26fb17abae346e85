from typing import Protocol

from domain.model.user import NewUser, User


class UserRepository(Protocol):
    """Protocol defining the interface for user credential storage.

    Implementations enforce uniqueness of username and email themselves
    (unique constraint or index) and raise ``DuplicateError`` on violation.
    """
    def create(self, new_user: NewUser) -> User:
        """Persist a new user and return it. Raise DuplicateError on a unique key clash."""
        ...

    def get_by_id(self, user_id: str) -> User | None:
        """Find a user by ID. Return User or None if not found."""
        ...

    def get_by_email(self, email: str) -> User | None:
        """Find a user by email. Return User or None if not found."""
        ...

    def get_by_username(self, username: str) -> User | None:
        """Find a user by username. Return User or None if not found."""
        ...

    def update_password(self, user_id: str, password_hash: str) -> User | None:
        """Replace the stored password hash. Return the updated User or None if not found."""
        ...

    def ping(self) -> bool:
        """Return True if the backing store is reachable."""
        ...

    def close(self) -> None:
        """Release connections held by the repository."""
        ...

    def ensure_schema(self) -> None:
        """Create tables or indexes the store relies on. Safe to call repeatedly."""
        ...
