from __future__ import annotations

"""
👤 MovieMeter: User (accounts & auth)
=====================================

Account entity: display name, login email, password hash, optional profile
image and an advisory review counter.

Design highlights
-----------------
• **Case-insensitive uniqueness**: email is stored lower-cased and carries a
  unique constraint, so the database rejects a second registration even when
  two requests race past the application-level check.
• **Defensive checks**: name length, non-blank email/hash, non-negative
  `review_count`.
• `password_hash` is never part of any outward schema (see
  `moviemeter.schemas.user.UserPublic`).
"""

from sqlalchemy import CheckConstraint, Integer, String, Text, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from moviemeter.db.base_class import Base, TimestampMixin, UUIDPKMixin


class User(UUIDPKMixin, TimestampMixin, Base):
    """Registered account."""

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False, doc="Lower-cased login email")
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False, doc="bcrypt hash")
    profile_image: Mapped[str | None] = mapped_column(
        Text, nullable=True, doc="http(s) URL or data:image/... inline encoding"
    )
    review_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )

    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        CheckConstraint("length(email) > 0", name="email_not_blank"),
        CheckConstraint("length(password_hash) > 0", name="password_hash_not_blank"),
        CheckConstraint("length(name) BETWEEN 2 AND 50", name="name_len"),
        CheckConstraint("review_count >= 0", name="review_count_nonneg"),
    )

    reviews = relationship(
        "Review",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="noload",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"
