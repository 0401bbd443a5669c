# moviemeter/schemas/user.py

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from moviemeter.schemas.common import CamelModel


# ──────────────── Outward user ────────────────
class UserPublic(CamelModel):
    """The only shape a user ever leaves the API in. No password field."""

    id: UUID
    name: str
    email: str
    profile_image: Optional[str] = None
    review_count: int = 0
    created_at: Optional[datetime] = None


# ──────────────── Register / Login ────────────────
class RegisterRequest(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = Field(None, repr=False)


class RegisterResponse(CamelModel):
    message: str = "User registered successfully"
    user: UserPublic


class LoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = Field(None, repr=False)


class LoginResponse(CamelModel):
    token: str
    user: UserPublic


# ──────────────── Profile ────────────────
class ProfileUpdate(CamelModel):
    name: Optional[str] = None


class PictureUpdate(CamelModel):
    profile_image: Optional[str] = None
