"""
Auth & profile API
==================

POST /auth/register          → create an account (201, no token)
POST /auth/login             → email + password → identity token
GET  /auth/profile           → current user
PUT  /auth/profile           → change display name
PUT  /auth/profile/picture   → set or clear the profile picture

Security & Hardening
--------------------
- **No-store** cache headers on token-bearing and user-specific responses.
- Users leave the API only as `UserPublic` (no password hash).
- Neutral login errors; the service does the validation and hashing.
"""

from fastapi import APIRouter, Depends, Response, status

from moviemeter.dependencies.auth import Identity, require_identity
from moviemeter.schemas.user import (
    LoginRequest,
    LoginResponse,
    PictureUpdate,
    ProfileUpdate,
    RegisterRequest,
    RegisterResponse,
    UserPublic,
)
from moviemeter.security_headers import set_sensitive_cache
from moviemeter.services.account_service import AccountService, get_account_service

router = APIRouter(prefix="/auth", tags=["Authentication"])


# ──────────────────────────────────────────────────────
# 👤 Register / Login
# ──────────────────────────────────────────────────────
@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new account",
)
async def register(
    payload: RegisterRequest,
    response: Response,
    accounts: AccountService = Depends(get_account_service),
) -> RegisterResponse:
    set_sensitive_cache(response)
    user = await accounts.register(payload.name, payload.email, payload.password)
    return RegisterResponse(user=UserPublic.model_validate(user))


@router.post("/login", response_model=LoginResponse, summary="Exchange credentials for a token")
async def login(
    payload: LoginRequest,
    response: Response,
    accounts: AccountService = Depends(get_account_service),
) -> LoginResponse:
    set_sensitive_cache(response)
    token, user = await accounts.login(payload.email, payload.password)
    return LoginResponse(token=token, user=UserPublic.model_validate(user))


# ──────────────────────────────────────────────────────
# 🪪 Profile
# ──────────────────────────────────────────────────────
@router.get("/profile", response_model=UserPublic, summary="Current user profile")
async def get_profile(
    response: Response,
    identity: Identity = Depends(require_identity),
    accounts: AccountService = Depends(get_account_service),
) -> UserPublic:
    set_sensitive_cache(response)
    return UserPublic.model_validate(await accounts.get_profile(identity.user_id))


@router.put("/profile", response_model=UserPublic, summary="Change display name")
async def update_profile(
    payload: ProfileUpdate,
    response: Response,
    identity: Identity = Depends(require_identity),
    accounts: AccountService = Depends(get_account_service),
) -> UserPublic:
    set_sensitive_cache(response)
    return UserPublic.model_validate(await accounts.update_name(identity.user_id, payload.name))


@router.put("/profile/picture", response_model=UserPublic, summary="Set or clear profile picture")
async def update_picture(
    payload: PictureUpdate,
    response: Response,
    identity: Identity = Depends(require_identity),
    accounts: AccountService = Depends(get_account_service),
) -> UserPublic:
    set_sensitive_cache(response)
    user = await accounts.update_picture(identity.user_id, payload.profile_image)
    return UserPublic.model_validate(user)


__all__ = ["router"]
