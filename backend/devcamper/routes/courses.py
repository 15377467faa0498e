"""
DevCamper API — Course Routes
==============================

Access:
    GET                        public
    POST / PUT / DELETE        publisher, admin (bootcamp or course owner, or admin)

Courses are listed flat (/courses) or scoped to a bootcamp
(/bootcamps/{bootcamp_id}/courses); both include a bootcamp summary.
"""

import uuid

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from devcamper.auth.deps import require_roles
from devcamper.database import get_db_session
from devcamper.exceptions import BadRequestError
from devcamper.models.course import Course
from devcamper.models.user import User
from devcamper.schemas.common import Envelope, ErrorResponse, ListEnvelope
from devcamper.schemas.course import CourseCreate, CourseRead, CourseUpdate
from devcamper.services.advanced_results import AdvancedResults
from devcamper.services.course_service import (
    COURSE_EAGER,
    COURSE_FIELDS,
    course_service,
    serialize_course,
)

router = APIRouter(prefix="/api/v1", tags=["Courses"])

course_results = AdvancedResults(
    Course,
    COURSE_FIELDS,
    serialize_course,
    eager=COURSE_EAGER,
    scope_param="bootcamp_id",
    scope_column=Course.bootcamp_id,
)
publisher_or_admin = require_roles("publisher", "admin")

ERRORS = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}


@router.get("/courses", responses={200: {"model": ListEnvelope}, 400: {"model": ErrorResponse}})
async def list_courses(request: Request, _=Depends(course_results)) -> dict:
    return request.state.advanced_results


@router.get(
    "/bootcamps/{bootcamp_id}/courses",
    responses={200: {"model": ListEnvelope}, 400: {"model": ErrorResponse}},
)
async def list_bootcamp_courses(
    bootcamp_id: uuid.UUID, request: Request, _=Depends(course_results)
) -> dict:
    return request.state.advanced_results


@router.get("/courses/{course_id}", response_model=Envelope[CourseRead], responses=ERRORS)
async def get_course(
    course_id: uuid.UUID, db: AsyncSession = Depends(get_db_session)
) -> Envelope[CourseRead]:
    course = await course_service.get_course(db, course_id, with_bootcamp=True)
    return Envelope(data=CourseRead.from_model(course, with_bootcamp=True))


async def _create(
    db: AsyncSession, bootcamp_id: uuid.UUID, body: CourseCreate, user: User
) -> Envelope[CourseRead]:
    course = await course_service.create_course(db, bootcamp_id, body, user)
    return Envelope(data=CourseRead.from_model(course))


@router.post(
    "/bootcamps/{bootcamp_id}/courses",
    status_code=201,
    response_model=Envelope[CourseRead],
    responses=ERRORS,
)
async def create_bootcamp_course(
    bootcamp_id: uuid.UUID,
    body: CourseCreate,
    user: User = Depends(publisher_or_admin),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[CourseRead]:
    return await _create(db, bootcamp_id, body, user)


@router.post(
    "/courses",
    status_code=201,
    response_model=Envelope[CourseRead],
    responses=ERRORS,
    description="Same as the nested route; the bootcamp id comes from the `bootcamp` body field.",
)
async def create_course(
    body: CourseCreate,
    user: User = Depends(publisher_or_admin),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[CourseRead]:
    if body.bootcamp is None:
        raise BadRequestError(message="Please provide a bootcamp id", field="bootcamp")
    return await _create(db, body.bootcamp, body, user)


@router.put("/courses/{course_id}", response_model=Envelope[CourseRead], responses=ERRORS)
async def update_course(
    course_id: uuid.UUID,
    body: CourseUpdate,
    user: User = Depends(publisher_or_admin),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[CourseRead]:
    course = await course_service.update_course(db, course_id, body, user)
    return Envelope(data=CourseRead.from_model(course))


@router.delete("/courses/{course_id}", response_model=Envelope[dict], responses=ERRORS)
async def delete_course(
    course_id: uuid.UUID,
    user: User = Depends(publisher_or_admin),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[dict]:
    await course_service.delete_course(db, course_id, user)
    return Envelope(data={})
