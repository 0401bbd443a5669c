# moviemeter/schemas/review.py

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field, StrictInt

from moviemeter.schemas.common import CamelModel


class ReviewCreate(CamelModel):
    movie_id: Optional[str] = Field(None, description="External catalog key")
    movie_title: Optional[str] = None
    rating: Optional[StrictInt] = Field(None, description="Whole stars, 1..5")
    comment: Optional[str] = ""


class ReviewUpdate(CamelModel):
    rating: Optional[StrictInt] = None
    comment: Optional[str] = ""


class ReviewOut(CamelModel):
    id: UUID
    user_id: UUID
    movie_id: str
    movie_title: str
    rating: int
    comment: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DeleteConfirmationOut(CamelModel):
    message: str
    id: UUID
