from __future__ import annotations

"""
Review store: at most one review per (user, movie).

The pair is unique at the storage level. `SqlReviewRepository` maps the
`uq_reviews_user_movie` violation to `DuplicateReview`; the memory store keeps
a `(user_id, movie_id)` index that is checked and written atomically. Every
write re-validates rating and comment so no caller can persist an
out-of-range review.
"""

import itertools
import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Dict, List, Optional, Tuple
from uuid import UUID, uuid4

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from moviemeter.core.exceptions import DuplicateReview, NotFound
from moviemeter.db.base_class import utcnow
from moviemeter.db.models.review import Review
from moviemeter.db.session import get_async_db
from moviemeter.utils.validators import (
    parse_uuid,
    validate_comment,
    validate_movie_id,
    validate_movie_title,
    validate_rating,
)

logger = logging.getLogger(__name__)


@dataclass
class ReviewRecord:
    id: UUID
    user_id: UUID
    movie_id: str
    movie_title: str
    rating: int
    comment: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ReviewRepositoryProtocol:
    async def insert(
        self, *, user_id: UUID, movie_id: str, movie_title: str, rating: int, comment: str = ""
    ) -> ReviewRecord:
        raise NotImplementedError

    async def find_by_movie(self, movie_id: str) -> List[ReviewRecord]:
        raise NotImplementedError

    async def find_by_user(self, user_id: UUID) -> List[ReviewRecord]:
        raise NotImplementedError

    async def find_by_id(self, review_id: UUID | str) -> Optional[ReviewRecord]:
        raise NotImplementedError

    async def find_by_user_and_movie(self, user_id: UUID, movie_id: str) -> Optional[ReviewRecord]:
        raise NotImplementedError

    async def update(self, review_id: UUID | str, *, rating: int, comment: str) -> ReviewRecord:
        raise NotImplementedError

    async def remove(self, review_id: UUID | str) -> None:
        raise NotImplementedError


# ─────────────────────────────────────────────────────────────
# 🗄️ SQLAlchemy implementation
# ─────────────────────────────────────────────────────────────
def _to_record(r: Review) -> ReviewRecord:
    return ReviewRecord(
        id=r.id,
        user_id=r.user_id,
        movie_id=r.movie_id,
        movie_title=r.movie_title,
        rating=r.rating,
        comment=r.comment,
        created_at=r.created_at,
        updated_at=r.updated_at,
    )


def _newest_first():
    return (Review.created_at.desc(), Review.id.desc())


class SqlReviewRepository(ReviewRepositoryProtocol):
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def insert(
        self, *, user_id: UUID, movie_id: str, movie_title: str, rating: int, comment: str = ""
    ) -> ReviewRecord:
        review = Review(
            user_id=user_id,
            movie_id=validate_movie_id(movie_id),
            movie_title=validate_movie_title(movie_title),
            rating=validate_rating(rating),
            comment=validate_comment(comment),
        )
        self.db.add(review)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if "unique" in str(getattr(e, "orig", e)).lower():
                logger.info(f"Duplicate review rejected by storage constraint (movie={movie_id})")
                raise DuplicateReview()
            raise
        return _to_record(review)

    async def find_by_movie(self, movie_id: str) -> List[ReviewRecord]:
        stmt = select(Review).where(Review.movie_id == movie_id).order_by(*_newest_first())
        return [_to_record(r) for r in (await self.db.execute(stmt)).scalars().all()]

    async def find_by_user(self, user_id: UUID) -> List[ReviewRecord]:
        stmt = select(Review).where(Review.user_id == user_id).order_by(*_newest_first())
        return [_to_record(r) for r in (await self.db.execute(stmt)).scalars().all()]

    async def find_by_id(self, review_id: UUID | str) -> Optional[ReviewRecord]:
        rid = parse_uuid(review_id)
        row = await self.db.get(Review, rid) if rid else None
        return _to_record(row) if row else None

    async def find_by_user_and_movie(self, user_id: UUID, movie_id: str) -> Optional[ReviewRecord]:
        stmt = select(Review).where(Review.user_id == user_id, Review.movie_id == movie_id)
        row = (await self.db.execute(stmt)).scalar_one_or_none()
        return _to_record(row) if row else None

    async def update(self, review_id: UUID | str, *, rating: int, comment: str) -> ReviewRecord:
        rid = parse_uuid(review_id)
        review = await self.db.get(Review, rid) if rid else None
        if review is None:
            raise NotFound("Review not found")
        review.rating = validate_rating(rating)
        review.comment = validate_comment(comment)
        review.updated_at = utcnow()
        await self.db.commit()
        return _to_record(review)

    async def remove(self, review_id: UUID | str) -> None:
        rid = parse_uuid(review_id)
        review = await self.db.get(Review, rid) if rid else None
        if review is None:
            await self.db.rollback()
            raise NotFound("Review not found")
        await self.db.delete(review)
        await self.db.commit()


# ─────────────────────────────────────────────────────────────
# 🧪 In-memory implementation
# ─────────────────────────────────────────────────────────────
class MemoryReviewRepository(ReviewRepositoryProtocol):
    def __init__(self) -> None:
        self._reviews: Dict[UUID, ReviewRecord] = {}
        self._by_pair: Dict[Tuple[UUID, str], UUID] = {}
        self._order: Dict[UUID, int] = {}
        self._seq = itertools.count()

    def _sorted(self, records: List[ReviewRecord]) -> List[ReviewRecord]:
        records.sort(key=lambda r: (r.created_at, self._order[r.id]), reverse=True)
        return [replace(r) for r in records]

    async def insert(
        self, *, user_id: UUID, movie_id: str, movie_title: str, rating: int, comment: str = ""
    ) -> ReviewRecord:
        now = utcnow()
        record = ReviewRecord(
            id=uuid4(),
            user_id=user_id,
            movie_id=validate_movie_id(movie_id),
            movie_title=validate_movie_title(movie_title),
            rating=validate_rating(rating),
            comment=validate_comment(comment),
            created_at=now,
            updated_at=now,
        )
        key = (record.user_id, record.movie_id)
        if key in self._by_pair:
            raise DuplicateReview()
        self._by_pair[key] = record.id
        self._reviews[record.id] = record
        self._order[record.id] = next(self._seq)
        return replace(record)

    async def find_by_movie(self, movie_id: str) -> List[ReviewRecord]:
        return self._sorted([r for r in self._reviews.values() if r.movie_id == movie_id])

    async def find_by_user(self, user_id: UUID) -> List[ReviewRecord]:
        return self._sorted([r for r in self._reviews.values() if r.user_id == user_id])

    async def find_by_id(self, review_id: UUID | str) -> Optional[ReviewRecord]:
        rid = parse_uuid(review_id)
        record = self._reviews.get(rid) if rid else None
        return replace(record) if record else None

    async def find_by_user_and_movie(self, user_id: UUID, movie_id: str) -> Optional[ReviewRecord]:
        rid = self._by_pair.get((user_id, movie_id))
        return replace(self._reviews[rid]) if rid else None

    async def update(self, review_id: UUID | str, *, rating: int, comment: str) -> ReviewRecord:
        rid = parse_uuid(review_id)
        record = self._reviews.get(rid) if rid else None
        if record is None:
            raise NotFound("Review not found")
        updated = replace(
            record,
            rating=validate_rating(rating),
            comment=validate_comment(comment),
            updated_at=utcnow(),
        )
        self._reviews[record.id] = updated
        return replace(updated)

    async def remove(self, review_id: UUID | str) -> None:
        rid = parse_uuid(review_id)
        record = self._reviews.pop(rid, None) if rid else None
        if record is None:
            raise NotFound("Review not found")
        self._by_pair.pop((record.user_id, record.movie_id), None)
        self._order.pop(record.id, None)


def get_review_repository(db: AsyncSession = Depends(get_async_db)) -> ReviewRepositoryProtocol:
    """Request-scoped review store bound to the request's session."""
    return SqlReviewRepository(db)


__all__ = [
    "ReviewRecord",
    "ReviewRepositoryProtocol",
    "SqlReviewRepository",
    "MemoryReviewRepository",
    "get_review_repository",
]
