"""In-memory implementation of UserRepository for testing."""

import uuid
from dataclasses import replace
from datetime import datetime, timezone

from domain.model.errors import DuplicateError
from domain.model.user import NewUser, User


class FakeUserRepository:
    def __init__(self):
        self.store: dict[str, User] = {}

    # ── write operations ─────────────────────────────────────

    def create(self, new_user: NewUser) -> User:
        for existing in self.store.values():
            if existing.email == new_user.email:
                raise DuplicateError("Email already registered")
            if existing.username == new_user.username:
                raise DuplicateError("Username already taken")

        now = datetime.now(timezone.utc)
        user = User(
            id=uuid.uuid4().hex,
            username=new_user.username,
            email=new_user.email,
            password_hash=new_user.password_hash,
            first_name=new_user.first_name,
            last_name=new_user.last_name,
            role=new_user.role,
            created_at=now,
            updated_at=now,
        )
        self.store[user.id] = user
        return replace(user)

    def update_password(self, user_id: str, password_hash: str) -> User | None:
        user = self.store.get(user_id)
        if not user:
            return None

        user.password_hash = password_hash
        user.updated_at = datetime.now(timezone.utc)
        return replace(user)

    # ── read operations ──────────────────────────────────────

    def get_by_id(self, user_id: str) -> User | None:
        user = self.store.get(user_id)
        return replace(user) if user else None

    def get_by_email(self, email: str) -> User | None:
        for user in self.store.values():
            if user.email == email:
                return replace(user)
        return None

    def get_by_username(self, username: str) -> User | None:
        for user in self.store.values():
            if user.username == username:
                return replace(user)
        return None

    # ── lifecycle ────────────────────────────────────────────

    def ensure_schema(self) -> None:
        pass

    def ping(self) -> bool:
        return True

    def close(self) -> None:
        pass
