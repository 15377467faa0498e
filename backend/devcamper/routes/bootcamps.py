"""
DevCamper API — Bootcamp Routes
================================

Access:
    GET     /bootcamps, /bootcamps/{id}, /bootcamps/radius/...   public
    POST    /bootcamps                                           publisher, admin
    PUT     /bootcamps/{id}, /bootcamps/{id}/photo               publisher, admin (owner or admin)
    DELETE  /bootcamps/{id}                                      publisher, admin (owner or admin)
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, File, Path, Request, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from devcamper.auth.deps import require_roles
from devcamper.database import get_db_session
from devcamper.dependencies import get_geocoder, get_photo_store
from devcamper.models.bootcamp import Bootcamp
from devcamper.models.user import User
from devcamper.schemas.bootcamp import BootcampCreate, BootcampRead, BootcampUpdate
from devcamper.schemas.common import Envelope, ErrorResponse, ListEnvelope
from devcamper.services.advanced_results import AdvancedResults
from devcamper.services.bootcamp_service import (
    BOOTCAMP_EAGER,
    BOOTCAMP_FIELDS,
    bootcamp_service,
    serialize_bootcamp,
)
from devcamper.services.file_service import PhotoStore
from devcamper.services.geocoder import Geocoder

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/bootcamps", tags=["Bootcamps"])

bootcamp_results = AdvancedResults(
    Bootcamp, BOOTCAMP_FIELDS, serialize_bootcamp, eager=BOOTCAMP_EAGER
)
publisher_or_admin = require_roles("publisher", "admin")

ERRORS = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}


@router.get(
    "",
    responses={200: {"model": ListEnvelope}, 400: {"model": ErrorResponse}},
    summary="List bootcamps",
    description=(
        "Filter with `field=value` or `field[gt|gte|lt|lte|in]=value`, choose fields "
        "with `select=a,b`, order with `sort=a,-b`, paginate with `page` and `limit`. "
        "Each bootcamp includes its courses."
    ),
)
async def list_bootcamps(request: Request, _=Depends(bootcamp_results)) -> dict:
    return request.state.advanced_results


@router.get(
    "/radius/{zipcode}/{distance}",
    responses={400: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
    summary="Bootcamps within a distance (miles) of a zipcode",
)
async def bootcamps_in_radius(
    zipcode: str,
    distance: float = Path(..., gt=0, description="Radius in miles"),
    db: AsyncSession = Depends(get_db_session),
    geocoder: Geocoder = Depends(get_geocoder),
) -> dict:
    bootcamps = await bootcamp_service.bootcamps_in_radius(db, zipcode, distance, geocoder)
    return {
        "success": True,
        "count": len(bootcamps),
        "data": [serialize_bootcamp(b) for b in bootcamps],
    }


@router.get("/{bootcamp_id}", response_model=Envelope[BootcampRead], responses=ERRORS)
async def get_bootcamp(
    bootcamp_id: uuid.UUID, db: AsyncSession = Depends(get_db_session)
) -> Envelope[BootcampRead]:
    bootcamp = await bootcamp_service.get_bootcamp(db, bootcamp_id)
    return Envelope(data=BootcampRead.from_model(bootcamp))


@router.post(
    "",
    status_code=201,
    response_model=Envelope[BootcampRead],
    responses={**ERRORS, 409: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
    summary="Create a bootcamp",
    description="Publishers may own one bootcamp; admins any number.",
)
async def create_bootcamp(
    body: BootcampCreate,
    user: User = Depends(publisher_or_admin),
    db: AsyncSession = Depends(get_db_session),
    geocoder: Geocoder = Depends(get_geocoder),
) -> Envelope[BootcampRead]:
    bootcamp = await bootcamp_service.create_bootcamp(db, body, user, geocoder)
    return Envelope(data=BootcampRead.from_model(bootcamp))


@router.put(
    "/{bootcamp_id}",
    response_model=Envelope[BootcampRead],
    responses={**ERRORS, 409: {"model": ErrorResponse}},
)
async def update_bootcamp(
    bootcamp_id: uuid.UUID,
    body: BootcampUpdate,
    user: User = Depends(publisher_or_admin),
    db: AsyncSession = Depends(get_db_session),
    geocoder: Geocoder = Depends(get_geocoder),
) -> Envelope[BootcampRead]:
    bootcamp = await bootcamp_service.update_bootcamp(db, bootcamp_id, body, user, geocoder)
    return Envelope(data=BootcampRead.from_model(bootcamp))


@router.delete("/{bootcamp_id}", response_model=Envelope[dict], responses=ERRORS)
async def delete_bootcamp(
    bootcamp_id: uuid.UUID,
    user: User = Depends(publisher_or_admin),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[dict]:
    await bootcamp_service.delete_bootcamp(db, bootcamp_id, user)
    return Envelope(data={})


@router.put(
    "/{bootcamp_id}/photo",
    response_model=Envelope[str],
    responses={**ERRORS, 500: {"model": ErrorResponse}},
    summary="Upload a bootcamp photo",
    description="Multipart field `file`; any image format, resized before storage.",
)
async def upload_bootcamp_photo(
    bootcamp_id: uuid.UUID,
    file: Optional[UploadFile] = File(default=None),
    user: User = Depends(publisher_or_admin),
    db: AsyncSession = Depends(get_db_session),
    photo_store: PhotoStore = Depends(get_photo_store),
) -> Envelope[str]:
    try:
        bootcamp = await bootcamp_service.upload_photo(db, bootcamp_id, user, file, photo_store)
    finally:
        if file is not None:
            await file.close()
    return Envelope(data=bootcamp.photo)
