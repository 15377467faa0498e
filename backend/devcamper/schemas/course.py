"""
DevCamper API — Course Schemas
===============================
"""

import uuid
from typing import Literal, Optional, Union

from pydantic import Field

from devcamper.models.course import Course
from devcamper.schemas.bootcamp import BootcampSummary
from devcamper.schemas.common import CamelModel, UTCDateTime

SkillLevel = Literal["beginner", "intermediate", "advanced"]


class CourseCreate(CamelModel):
    title: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1)
    weeks: int = Field(ge=1, le=520)
    tuition: int = Field(ge=0)
    minimum_skill: SkillLevel
    scholarship_available: bool = False
    # Only read on POST /courses; the nested route takes it from the path
    bootcamp: Optional[uuid.UUID] = None


class CourseUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, min_length=1)
    weeks: Optional[int] = Field(default=None, ge=1, le=520)
    tuition: Optional[int] = Field(default=None, ge=0)
    minimum_skill: Optional[SkillLevel] = None
    scholarship_available: Optional[bool] = None


class CourseRead(CamelModel):
    id: uuid.UUID
    bootcamp: Union[BootcampSummary, uuid.UUID]
    user: uuid.UUID
    title: str
    description: str
    weeks: int
    tuition: int
    minimum_skill: str
    scholarship_available: bool
    created_at: UTCDateTime

    @classmethod
    def from_model(cls, course: Course, with_bootcamp: bool = False) -> "CourseRead":
        """`with_bootcamp` requires `course.bootcamp` to be loaded already."""
        bootcamp: Union[BootcampSummary, uuid.UUID] = course.bootcamp_id
        if with_bootcamp:
            bootcamp = BootcampSummary.model_validate(course.bootcamp)
        return cls(
            id=course.id,
            bootcamp=bootcamp,
            user=course.user_id,
            title=course.title,
            description=course.description,
            weeks=course.weeks,
            tuition=course.tuition,
            minimum_skill=course.minimum_skill,
            scholarship_available=course.scholarship_available,
            created_at=course.created_at,
        )
