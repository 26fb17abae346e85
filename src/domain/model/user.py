from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Role(str, Enum):
    """Roles a user can hold."""
    USER = 'user'
    ADMIN = 'admin'


@dataclass
class User:
    """Domain model representing a registered user."""
    id: str
    username: str
    email: str
    password_hash: str
    created_at: datetime
    updated_at: datetime
    first_name: str | None = None
    last_name: str | None = None
    role: Role = Role.USER
    is_active: bool = True
    last_login: datetime | None = None


@dataclass(frozen=True)
class NewUser:
    """Write payload for creating a user. The secret is already hashed."""
    username: str
    email: str
    password_hash: str
    first_name: str | None = None
    last_name: str | None = None
    role: Role = Role.USER
