"""Pydantic models for API request/response.

JSON keys are camelCase on the wire; snake_case field names are accepted on input too.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator
from pydantic.alias_generators import to_camel

from domain.model.user import User


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserResponse(CamelModel):
    """Public representation of a user. Has no password field on purpose."""
    id: str
    username: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: str
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        """Convert domain User to API UserResponse."""
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            role=user.role.value,
            is_active=user.is_active,
            last_login=user.last_login,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class RegisterRequest(CamelModel):
    """Request model for user registration."""
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=100)
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)


class LoginRequest(CamelModel):
    """Request model for login. Either email or username identifies the user."""
    email: Optional[str] = None
    username: Optional[str] = None
    password: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def _require_identifier(self) -> "LoginRequest":
        if not (self.email or self.username):
            raise ValueError("Either email or username is required")
        return self

    @property
    def identifier(self) -> str:
        return self.email or self.username


class RefreshRequest(CamelModel):
    """Request model for exchanging a refresh token."""
    refresh_token: str = Field(..., min_length=1)


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, max_length=100)


class MessageResponse(CamelModel):
    success: bool = True
    message: str


class ProfileResponse(CamelModel):
    success: bool = True
    user: UserResponse


class AuthResponse(CamelModel):
    """Response model for register and login."""
    success: bool = True
    message: str
    user: UserResponse
    access_token: str
    refresh_token: str


class RefreshResponse(CamelModel):
    success: bool = True
    access_token: str
    refresh_token: str
