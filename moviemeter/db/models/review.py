from __future__ import annotations

"""
⭐ MovieMeter: Review (user ratings & comments)
===============================================

One user's 1–5 star rating and optional comment for one catalog movie.

Highlights
----------
• **Single review per (user, movie)** via a unique constraint. The constraint,
  not the service pre-check, is what settles concurrent duplicate submits.
• **Defensive checks** on rating range and comment/title length.
• **Listing indexes** for per-movie and per-user timelines (newest first).

`movie_id` is an opaque key of the external catalog; `movie_title` is a
snapshot taken at submit time.
"""

from uuid import UUID

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Index,
    SmallInteger,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from moviemeter.db.base_class import Base, TimestampMixin, UUIDPKMixin


class Review(UUIDPKMixin, TimestampMixin, Base):
    """A user's rating and comment for a movie."""

    __tablename__ = "reviews"

    user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, doc="Author of the review."
    )
    movie_id: Mapped[str] = mapped_column(String(128), nullable=False, doc="External catalog key.")
    movie_title: Mapped[str] = mapped_column(String(200), nullable=False)
    rating: Mapped[int] = mapped_column(SmallInteger, nullable=False, doc="Stars, 1..5.")
    comment: Mapped[str] = mapped_column(Text, nullable=False, default="", server_default=text("''"))

    __mapper_args__ = {"eager_defaults": True}

    __table_args__ = (
        UniqueConstraint("user_id", "movie_id", name="uq_reviews_user_movie"),
        CheckConstraint("rating BETWEEN 1 AND 5", name="rating_range"),
        CheckConstraint("length(comment) <= 1000", name="comment_len"),
        CheckConstraint("length(movie_title) BETWEEN 1 AND 200", name="movie_title_len"),
        Index("ix_reviews_movie_created", "movie_id", "created_at"),
        Index("ix_reviews_user_created", "user_id", "created_at"),
    )

    user = relationship("User", back_populates="reviews", lazy="noload")

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Review user={self.user_id} movie={self.movie_id} rating={self.rating}>"
