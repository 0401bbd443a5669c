from __future__ import annotations

"""
Field validators shared by the stores and the services.

Every helper either returns the normalized value or raises
`ValidationFailed` with a client-facing message. Stores call them on every
write so the invariants hold regardless of the caller.
"""

import re
from typing import Any, Optional
from uuid import UUID

from moviemeter.core.exceptions import ValidationFailed

RATING_MIN = 1
RATING_MAX = 5
COMMENT_MAX = 1000
MOVIE_TITLE_MAX = 200
MOVIE_ID_MAX = 128
NAME_MIN = 2
NAME_MAX = 50

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]{2,}$")
_DATA_IMAGE_RE = re.compile(r"^data:image/[A-Za-z0-9.+-]+(;[A-Za-z0-9=.+-]+)*,", re.IGNORECASE)


def parse_uuid(value: Any) -> Optional[UUID]:
    """Return `value` as a UUID, or None when it is not one."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return None


# ─────────────────────────────────────────────────────────────
# 👤 Accounts
# ─────────────────────────────────────────────────────────────
def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def validate_email(email: Optional[str]) -> str:
    norm = normalize_email(email)
    if not norm:
        raise ValidationFailed("Email is required", details={"field": "email"})
    if len(norm) > 320 or not _EMAIL_RE.match(norm):
        raise ValidationFailed("Invalid email format", details={"field": "email"})
    return norm


def validate_name(name: Optional[str]) -> str:
    trimmed = (name or "").strip()
    if not trimmed:
        raise ValidationFailed("Name is required", details={"field": "name"})
    if not NAME_MIN <= len(trimmed) <= NAME_MAX:
        raise ValidationFailed(
            f"Name must be between {NAME_MIN} and {NAME_MAX} characters", details={"field": "name"}
        )
    return trimmed


def validate_profile_image(value: Optional[str], *, max_chars: int) -> Optional[str]:
    """`None`/blank clears the image; otherwise URL or inline image within bounds."""
    if value is None:
        return None
    raw = value.strip()
    if not raw:
        return None
    is_url = raw.lower().startswith(("http://", "https://"))
    if not is_url and not _DATA_IMAGE_RE.match(raw):
        raise ValidationFailed("Invalid image format", details={"field": "profileImage"})
    if len(raw) > max_chars:
        raise ValidationFailed(
            "Image too large. Please use an image under 1MB", details={"field": "profileImage"}
        )
    return raw


# ─────────────────────────────────────────────────────────────
# ⭐ Reviews
# ─────────────────────────────────────────────────────────────
def validate_movie_id(movie_id: Optional[str]) -> str:
    mid = "" if movie_id is None else str(movie_id).strip()
    if not mid:
        raise ValidationFailed("Movie ID is required", details={"field": "movieId"})
    if len(mid) > MOVIE_ID_MAX:
        raise ValidationFailed(
            f"Movie ID cannot exceed {MOVIE_ID_MAX} characters", details={"field": "movieId"}
        )
    return mid


def validate_movie_title(title: Optional[str]) -> str:
    trimmed = (title or "").strip()
    if not trimmed:
        raise ValidationFailed("Movie title is required", details={"field": "movieTitle"})
    if len(trimmed) > MOVIE_TITLE_MAX:
        raise ValidationFailed(
            f"Movie title cannot exceed {MOVIE_TITLE_MAX} characters", details={"field": "movieTitle"}
        )
    return trimmed


def validate_rating(rating: Any) -> int:
    if rating is None:
        raise ValidationFailed("Rating is required", details={"field": "rating"})
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValidationFailed("Rating must be a whole number", details={"field": "rating"})
    if not RATING_MIN <= rating <= RATING_MAX:
        raise ValidationFailed(
            f"Rating must be between {RATING_MIN} and {RATING_MAX}", details={"field": "rating"}
        )
    return rating


def validate_comment(comment: Optional[str]) -> str:
    trimmed = (comment or "").strip()
    if len(trimmed) > COMMENT_MAX:
        raise ValidationFailed(
            f"Comment cannot exceed {COMMENT_MAX} characters", details={"field": "comment"}
        )
    return trimmed


__all__ = [
    "RATING_MIN",
    "RATING_MAX",
    "COMMENT_MAX",
    "MOVIE_TITLE_MAX",
    "parse_uuid",
    "normalize_email",
    "validate_email",
    "validate_name",
    "validate_profile_image",
    "validate_movie_id",
    "validate_movie_title",
    "validate_rating",
    "validate_comment",
]
