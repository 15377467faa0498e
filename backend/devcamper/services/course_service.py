"""
DevCamper API — Course Service
===============================

What:  Course CRUD with parent-bootcamp ownership checks.
How:   After every course write the parent bootcamp's `average_cost` is
       recomputed inside the same transaction.

average_cost = mean tuition rounded up to the next multiple of 10
               (NULL when the bootcamp has no courses)
"""

import logging
import math
import uuid
from typing import Any, Dict, Optional

from pydantic.alias_generators import to_camel
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from devcamper.exceptions import NotFoundError
from devcamper.models.bootcamp import Bootcamp
from devcamper.models.course import Course
from devcamper.models.user import User
from devcamper.schemas.bootcamp import BootcampSummary
from devcamper.schemas.course import CourseCreate, CourseRead, CourseUpdate
from devcamper.services.advanced_results import Eager, ResourceFields
from devcamper.services.common import ensure_owner_or_admin, flush_or_conflict

logger = logging.getLogger(__name__)

COURSE_FIELDS = ResourceFields(
    columns={
        "id": Course.id,
        "bootcamp": Course.bootcamp_id,
        "user": Course.user_id,
        "title": Course.title,
        "weeks": Course.weeks,
        "tuition": Course.tuition,
        "minimumSkill": Course.minimum_skill,
        "scholarshipAvailable": Course.scholarship_available,
        "createdAt": Course.created_at,
    },
    selectable=[to_camel(name) for name in CourseRead.model_fields],
)


def serialize_course(course: Course) -> Dict[str, Any]:
    return CourseRead.from_model(course).model_dump(by_alias=True, mode="json")


def serialize_bootcamp_summary(bootcamp: Optional[Bootcamp]) -> Optional[Dict[str, Any]]:
    if bootcamp is None:
        return None
    return BootcampSummary.model_validate(bootcamp).model_dump(by_alias=True, mode="json")


COURSE_EAGER = (
    Eager(key="bootcamp", relationship=Course.bootcamp, serialize=serialize_bootcamp_summary),
)


def round_up_to_ten(value: float) -> int:
    return int(math.ceil(value / 10) * 10)


async def recompute_average_cost(db: AsyncSession, bootcamp_id: uuid.UUID) -> Optional[int]:
    mean = await db.scalar(
        select(func.avg(Course.tuition)).where(Course.bootcamp_id == bootcamp_id)
    )
    average_cost = None if mean is None else round_up_to_ten(float(mean))
    await db.execute(
        update(Bootcamp).where(Bootcamp.id == bootcamp_id).values(average_cost=average_cost)
    )
    logger.debug("Bootcamp %s average_cost=%s", bootcamp_id, average_cost)
    return average_cost


class CourseService:
    async def get_course(
        self, db: AsyncSession, course_id: uuid.UUID, with_bootcamp: bool = False
    ) -> Course:
        stmt = select(Course).where(Course.id == course_id)
        if with_bootcamp:
            stmt = stmt.options(selectinload(Course.bootcamp))
        course = await db.scalar(stmt)
        if course is None:
            raise NotFoundError(resource="course", resource_id=str(course_id))
        return course

    async def create_course(
        self,
        db: AsyncSession,
        bootcamp_id: uuid.UUID,
        data: CourseCreate,
        user: User,
    ) -> Course:
        """
        Raises:
            NotFoundError: no bootcamp with that id
            ForbiddenError: user neither owns the bootcamp nor is an admin
        """
        bootcamp = await db.get(Bootcamp, bootcamp_id)
        if bootcamp is None:
            raise NotFoundError(resource="bootcamp", resource_id=str(bootcamp_id))
        ensure_owner_or_admin(
            bootcamp.user_id, user, "add a course to", "bootcamp", bootcamp.id
        )

        course = Course(
            **data.model_dump(exclude={"bootcamp"}),
            bootcamp_id=bootcamp.id,
            user_id=user.id,
        )
        db.add(course)
        await flush_or_conflict(db)
        await recompute_average_cost(db, bootcamp.id)
        logger.info("Course created: %s in bootcamp %s", course.id, bootcamp.id)
        return course

    async def update_course(
        self,
        db: AsyncSession,
        course_id: uuid.UUID,
        data: CourseUpdate,
        user: User,
    ) -> Course:
        course = await self.get_course(db, course_id)
        ensure_owner_or_admin(course.user_id, user, "update", "course", course.id)

        for key, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(course, key, value)
        await flush_or_conflict(db)
        await recompute_average_cost(db, course.bootcamp_id)
        return course

    async def delete_course(self, db: AsyncSession, course_id: uuid.UUID, user: User) -> None:
        course = await self.get_course(db, course_id)
        ensure_owner_or_admin(course.user_id, user, "delete", "course", course.id)

        bootcamp_id = course.bootcamp_id
        await db.delete(course)
        await db.flush()
        await recompute_average_cost(db, bootcamp_id)
        logger.info("Course deleted: %s", course_id)


course_service = CourseService()
