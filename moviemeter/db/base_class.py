from __future__ import annotations

"""
# MovieMeter: SQLAlchemy Base & Mixins

SQLAlchemy 2.0 declarative **Base** with:
- Global **naming conventions** (stable constraint names)
- Helpful `__repr__` for debugging
- `UUIDPKMixin`: application-generated UUID primary key
- `TimestampMixin`: `created_at` / `updated_at` (UTC, microsecond precision,
  set application-side so ordering is stable on every backend)

Usage:
    from moviemeter.db.base_class import Base, UUIDPKMixin, TimestampMixin

    class Review(UUIDPKMixin, TimestampMixin, Base):
        __tablename__ = "reviews"
"""

from datetime import datetime, timezone
from uuid import UUID, uuid4

from sqlalchemy import DateTime, MetaData, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware UTC timestamp on every backend.

    SQLite keeps no offset, so values are stored as UTC and read back with
    `tzinfo=UTC`; naive inputs are taken as UTC.
    """
    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class Base(DeclarativeBase):
    """Global declarative base for MovieMeter models."""
    metadata = MetaData(naming_convention=NAMING_CONVENTION)

    def __repr__(self) -> str:  # pragma: no cover (repr convenience)
        attrs: list[str] = []
        for key in ("id", "email", "movie_id"):
            if hasattr(self, key):
                attrs.append(f"{key}={getattr(self, key)!r}")
        return f"{self.__class__.__name__}({', '.join(attrs)})"


class UUIDPKMixin:
    """UUID primary key generated by the application."""
    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)


class TimestampMixin:
    """
    UTC timestamps.
    - `created_at`: set once at insert
    - `updated_at`: set at insert and refreshed on change
    """
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )


__all__ = ["Base", "UUIDPKMixin", "TimestampMixin", "NAMING_CONVENTION", "UTCDateTime", "utcnow"]
