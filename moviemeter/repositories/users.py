from __future__ import annotations

"""
Credential store: user accounts keyed by id and by normalized email.

Two implementations share `UserRepositoryProtocol`:

- `SqlUserRepository`   → SQLAlchemy async session (one per request)
- `MemoryUserRepository` → process-local dicts (tests, local experiments)

Email uniqueness is settled by storage, not by the caller's pre-check: the
SQL store relies on the `uq_users_email` constraint, the memory store on its
email index, which is checked and written with no await in between.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID, uuid4

from fastapi import Depends
from sqlalchemy import case, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from moviemeter.core.config import settings
from moviemeter.core.exceptions import DuplicateEmail, NotFound, ValidationFailed
from moviemeter.db.base_class import utcnow
from moviemeter.db.models.user import User
from moviemeter.db.session import get_async_db
from moviemeter.utils.validators import (
    normalize_email,
    parse_uuid,
    validate_email,
    validate_name,
    validate_profile_image,
)

logger = logging.getLogger(__name__)


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


@dataclass
class UserRecord:
    id: UUID
    name: str
    email: str
    password_hash: str = field(repr=False)
    profile_image: Optional[str] = None
    review_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


def _validated_hash(password_hash: Optional[str]) -> str:
    if not password_hash or not password_hash.strip():
        raise ValidationFailed("Password hash is required", details={"field": "password"})
    return password_hash


def _profile_changes(name: Any, profile_image: Any) -> Dict[str, Any]:
    """Validate the mutable profile fields; UNSET leaves a field untouched."""
    changes: Dict[str, Any] = {}
    if name is not UNSET:
        changes["name"] = validate_name(name)
    if profile_image is not UNSET:
        changes["profile_image"] = validate_profile_image(
            profile_image, max_chars=settings.PROFILE_IMAGE_MAX_CHARS
        )
    return changes


def _is_unique_violation(err: IntegrityError) -> bool:
    return "unique" in str(getattr(err, "orig", err)).lower()


class UserRepositoryProtocol:
    async def create_user(self, name: str, email: str, password_hash: str) -> UserRecord:
        raise NotImplementedError

    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        raise NotImplementedError

    async def find_by_id(self, user_id: UUID | str) -> Optional[UserRecord]:
        raise NotImplementedError

    async def update_profile(
        self, user_id: UUID | str, *, name: Any = UNSET, profile_image: Any = UNSET
    ) -> UserRecord:
        raise NotImplementedError

    async def adjust_review_count(self, user_id: UUID | str, delta: int) -> None:
        """Shift the advisory counter by `delta`, clamped at zero.

        The SQL store runs the UPDATE inside the session's open transaction
        without committing; the next store commit persists it together with
        the review write that caused it.
        """
        raise NotImplementedError


# ─────────────────────────────────────────────────────────────
# 🗄️ SQLAlchemy implementation
# ─────────────────────────────────────────────────────────────
def _to_record(u: User) -> UserRecord:
    return UserRecord(
        id=u.id,
        name=u.name,
        email=u.email,
        password_hash=u.password_hash,
        profile_image=u.profile_image,
        review_count=u.review_count,
        created_at=u.created_at,
        updated_at=u.updated_at,
    )


class SqlUserRepository(UserRepositoryProtocol):
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create_user(self, name: str, email: str, password_hash: str) -> UserRecord:
        user = User(
            name=validate_name(name),
            email=validate_email(email),
            password_hash=_validated_hash(password_hash),
            profile_image=None,
            review_count=0,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if _is_unique_violation(e):
                logger.info("Duplicate email rejected by storage constraint")
                raise DuplicateEmail()
            raise
        return _to_record(user)

    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        norm = normalize_email(email)
        if not norm:
            return None
        stmt = select(User).where(User.email == norm).execution_options(populate_existing=True)
        row = (await self.db.execute(stmt)).scalar_one_or_none()
        return _to_record(row) if row else None

    async def find_by_id(self, user_id: UUID | str) -> Optional[UserRecord]:
        uid = parse_uuid(user_id)
        if uid is None:
            return None
        row = await self.db.get(User, uid, populate_existing=True)
        return _to_record(row) if row else None

    async def update_profile(
        self, user_id: UUID | str, *, name: Any = UNSET, profile_image: Any = UNSET
    ) -> UserRecord:
        uid = parse_uuid(user_id)
        user = await self.db.get(User, uid, populate_existing=True) if uid else None
        if user is None:
            raise NotFound("User not found")
        changes = _profile_changes(name, profile_image)
        for key, value in changes.items():
            setattr(user, key, value)
        user.updated_at = utcnow()
        await self.db.commit()
        return _to_record(user)

    async def adjust_review_count(self, user_id: UUID | str, delta: int) -> None:
        uid = parse_uuid(user_id)
        if uid is None:
            return
        new_count = User.review_count + delta
        await self.db.execute(
            update(User)
            .where(User.id == uid)
            .values(review_count=case((new_count < 0, 0), else_=new_count))
            .execution_options(synchronize_session=False)
        )


# ─────────────────────────────────────────────────────────────
# 🧪 In-memory implementation
# ─────────────────────────────────────────────────────────────
class MemoryUserRepository(UserRepositoryProtocol):
    def __init__(self) -> None:
        self._users: Dict[UUID, UserRecord] = {}
        self._by_email: Dict[str, UUID] = {}

    async def create_user(self, name: str, email: str, password_hash: str) -> UserRecord:
        record = UserRecord(
            id=uuid4(),
            name=validate_name(name),
            email=validate_email(email),
            password_hash=_validated_hash(password_hash),
        )
        if record.email in self._by_email:
            raise DuplicateEmail()
        record.created_at = record.updated_at = utcnow()
        self._by_email[record.email] = record.id
        self._users[record.id] = record
        return replace(record)

    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        uid = self._by_email.get(normalize_email(email))
        return replace(self._users[uid]) if uid else None

    async def find_by_id(self, user_id: UUID | str) -> Optional[UserRecord]:
        uid = parse_uuid(user_id)
        record = self._users.get(uid) if uid else None
        return replace(record) if record else None

    async def update_profile(
        self, user_id: UUID | str, *, name: Any = UNSET, profile_image: Any = UNSET
    ) -> UserRecord:
        uid = parse_uuid(user_id)
        record = self._users.get(uid) if uid else None
        if record is None:
            raise NotFound("User not found")
        updated = replace(record, **_profile_changes(name, profile_image), updated_at=utcnow())
        self._users[record.id] = updated
        return replace(updated)

    async def adjust_review_count(self, user_id: UUID | str, delta: int) -> None:
        uid = parse_uuid(user_id)
        record = self._users.get(uid) if uid else None
        if record is not None:
            record.review_count = max(0, record.review_count + delta)


def get_user_repository(db: AsyncSession = Depends(get_async_db)) -> UserRepositoryProtocol:
    """Request-scoped credential store bound to the request's session."""
    return SqlUserRepository(db)


__all__ = [
    "UNSET",
    "UserRecord",
    "UserRepositoryProtocol",
    "SqlUserRepository",
    "MemoryUserRepository",
    "get_user_repository",
]
