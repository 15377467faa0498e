"""
DevCamper API — Review Schemas
===============================
"""

import uuid
from typing import Optional, Union

from pydantic import Field

from devcamper.models.review import Review
from devcamper.schemas.bootcamp import BootcampSummary
from devcamper.schemas.common import CamelModel, UTCDateTime


class ReviewCreate(CamelModel):
    title: str = Field(min_length=1, max_length=100)
    text: str = Field(min_length=1, max_length=500)
    rating: int = Field(ge=1, le=10)
    bootcamp: Optional[uuid.UUID] = None


class ReviewUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    text: Optional[str] = Field(default=None, min_length=1, max_length=500)
    rating: Optional[int] = Field(default=None, ge=1, le=10)


class ReviewRead(CamelModel):
    id: uuid.UUID
    bootcamp: Union[BootcampSummary, uuid.UUID]
    user: uuid.UUID
    title: str
    text: str
    rating: int
    created_at: UTCDateTime

    @classmethod
    def from_model(cls, review: Review, with_bootcamp: bool = False) -> "ReviewRead":
        bootcamp: Union[BootcampSummary, uuid.UUID] = review.bootcamp_id
        if with_bootcamp:
            bootcamp = BootcampSummary.model_validate(review.bootcamp)
        return cls(
            id=review.id,
            bootcamp=bootcamp,
            user=review.user_id,
            title=review.title,
            text=review.text,
            rating=review.rating,
            created_at=review.created_at,
        )
