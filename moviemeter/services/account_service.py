# moviemeter/services/account_service.py
from __future__ import annotations

"""
Account service: registration, login and profile edits
=======================================================

Key behaviors
-------------
- **Normalized email** (trimmed, lower-cased) and server-side bcrypt hashing.
- **Race-safe** duplicate handling: the store's unique constraint has the
  last word even when two registrations pass the pre-check together.
- **Neutral login errors**: unknown email and wrong password both surface as
  `InvalidCredentials` ("Invalid credentials").
- Hashing and verification run in a worker thread so the event loop keeps
  serving other requests.

The service is transport independent: it takes plain values and raises the
typed failures from `moviemeter.core.exceptions`.
"""

import asyncio
import logging
from typing import Optional, Tuple
from uuid import UUID

from fastapi import Depends

from moviemeter.core.config import settings
from moviemeter.core.exceptions import DuplicateEmail, InvalidCredentials, NotFound, ValidationFailed
from moviemeter.core.security import get_password_hash, verify_password
from moviemeter.repositories.users import (
    UserRecord,
    UserRepositoryProtocol,
    get_user_repository,
)
from moviemeter.services.token_service import TokenService, get_token_service
from moviemeter.utils.validators import validate_email, validate_name, validate_profile_image

logger = logging.getLogger(__name__)

_DUMMY_HASH: Optional[str] = None


async def _dummy_hash() -> str:
    """A real bcrypt hash to verify against when the email is unknown."""
    global _DUMMY_HASH
    if _DUMMY_HASH is None:
        _DUMMY_HASH = await asyncio.to_thread(get_password_hash, "moviemeter-timing-equalizer")
    return _DUMMY_HASH


class AccountService:
    def __init__(self, users: UserRepositoryProtocol, tokens: TokenService) -> None:
        self.users = users
        self.tokens = tokens

    # ─────────────────────────────────────────────────────────────
    # 📝 Register
    # ─────────────────────────────────────────────────────────────
    async def register(
        self, name: Optional[str], email: Optional[str], password: Optional[str]
    ) -> UserRecord:
        if not (name or "").strip() or not (email or "").strip() or not password:
            raise ValidationFailed("All fields are required")
        if len(password) < settings.MIN_PASSWORD_LENGTH:
            raise ValidationFailed(
                f"Password must be at least {settings.MIN_PASSWORD_LENGTH} characters",
                details={"field": "password"},
            )
        clean_name = validate_name(name)
        norm_email = validate_email(email)

        if await self.users.find_by_email(norm_email) is not None:
            raise DuplicateEmail()

        password_hash = await asyncio.to_thread(get_password_hash, password)
        user = await self.users.create_user(clean_name, norm_email, password_hash)
        logger.info(f"Registered user {user.id}")
        return user

    # ─────────────────────────────────────────────────────────────
    # 🔑 Login
    # ─────────────────────────────────────────────────────────────
    async def login(self, email: Optional[str], password: Optional[str]) -> Tuple[str, UserRecord]:
        if not (email or "").strip() or not password:
            raise ValidationFailed("Email and password are required")

        user = await self.users.find_by_email(email)
        if user is None:
            await asyncio.to_thread(verify_password, password, await _dummy_hash())
            logger.info("Login failed: unknown email")
            raise InvalidCredentials()

        if not await asyncio.to_thread(verify_password, password, user.password_hash):
            logger.info(f"Login failed: wrong password for user {user.id}")
            raise InvalidCredentials()

        token = self.tokens.issue(user.id, email=user.email)
        return token, user

    # ─────────────────────────────────────────────────────────────
    # 👤 Profile
    # ─────────────────────────────────────────────────────────────
    async def get_profile(self, user_id: UUID) -> UserRecord:
        user = await self.users.find_by_id(user_id)
        if user is None:
            raise NotFound("User not found")
        return user

    async def update_name(self, user_id: UUID, name: Optional[str]) -> UserRecord:
        return await self.users.update_profile(user_id, name=validate_name(name))

    async def update_picture(self, user_id: UUID, profile_image: Optional[str]) -> UserRecord:
        image = validate_profile_image(profile_image, max_chars=settings.PROFILE_IMAGE_MAX_CHARS)
        user = await self.users.update_profile(user_id, profile_image=image)
        logger.info(f"Profile picture {'updated' if image else 'cleared'} for user {user_id}")
        return user


def get_account_service(
    users: UserRepositoryProtocol = Depends(get_user_repository),
    tokens: TokenService = Depends(get_token_service),
) -> AccountService:
    return AccountService(users, tokens)


__all__ = ["AccountService", "get_account_service"]
