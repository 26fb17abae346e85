"""Authentication routes (register, login, profile, logout, refresh).

Handlers are thin: they run the auth service in the threadpool (bcrypt and
database calls block) and let domain errors propagate to the handlers in
``api.errors``.
"""

import logging

from fastapi import APIRouter, Depends, status
from starlette.concurrency import run_in_threadpool

from api.dependencies import get_settings, get_token_issuer, get_user_repo
from api.models import (
    AuthResponse,
    ChangePasswordRequest,
    LoginRequest,
    MessageResponse,
    ProfileResponse,
    RefreshRequest,
    RefreshResponse,
    RegisterRequest,
    UserResponse,
)
from api.security import get_current_claims
from domain.model.token import TokenClaims
from port.user_repository import UserRepository
from services import auth_service
from services.token_service import TokenIssuer
from utils.config import Settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    repo: UserRepository = Depends(get_user_repo),
    issuer: TokenIssuer = Depends(get_token_issuer),
    settings: Settings = Depends(get_settings),
):
    """Register a new user.

    Returns the sanitized user with an access and refresh token.
    400 on invalid input, 409 if the username or email is already registered.
    """
    user, tokens = await run_in_threadpool(
        auth_service.register,
        repo,
        issuer,
        username=request.username,
        email=request.email,
        password=request.password,
        first_name=request.first_name,
        last_name=request.last_name,
        rounds=settings.auth.bcrypt_rounds,
    )
    return AuthResponse(
        message="User registered successfully",
        user=UserResponse.from_domain(user),
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
    )


@router.post("/login", response_model=AuthResponse)
async def login(
    request: LoginRequest,
    repo: UserRepository = Depends(get_user_repo),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    """Login with email or username and password.

    401 with the same message whether the user is unknown or the password is wrong.
    """
    user, tokens = await run_in_threadpool(
        auth_service.authenticate, repo, issuer, request.identifier, request.password
    )
    return AuthResponse(
        message="Login successful",
        user=UserResponse.from_domain(user),
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
    )


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    claims: TokenClaims = Depends(get_current_claims),
    repo: UserRepository = Depends(get_user_repo),
):
    """Get the authenticated user's profile. 404 if the account no longer exists."""
    user = await run_in_threadpool(auth_service.get_profile, repo, claims.user_id)
    return ProfileResponse(user=UserResponse.from_domain(user))


@router.post("/logout", response_model=MessageResponse)
async def logout(claims: TokenClaims = Depends(get_current_claims)):
    """Acknowledge logout. Tokens are not revoked; the client discards them."""
    auth_service.logout(claims.user_id)
    return MessageResponse(message="Logged out successfully")


@router.post("/refresh", response_model=RefreshResponse)
async def refresh_token(
    request: RefreshRequest,
    repo: UserRepository = Depends(get_user_repo),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    """Exchange a refresh token for a new access token and a rotated refresh token."""
    tokens = await run_in_threadpool(auth_service.refresh, repo, issuer, request.refresh_token)
    return RefreshResponse(access_token=tokens.access_token, refresh_token=tokens.refresh_token)


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    request: ChangePasswordRequest,
    claims: TokenClaims = Depends(get_current_claims),
    repo: UserRepository = Depends(get_user_repo),
    settings: Settings = Depends(get_settings),
):
    """Change the authenticated user's password after checking the current one."""
    await run_in_threadpool(
        auth_service.change_password,
        repo,
        claims.user_id,
        request.current_password,
        request.new_password,
        rounds=settings.auth.bcrypt_rounds,
    )
    return MessageResponse(message="Password changed successfully")
