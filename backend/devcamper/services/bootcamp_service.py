"""
DevCamper API — Bootcamp Service
=================================

What:  Business rules for bootcamps: create/update/delete with ownership
       checks, radius search and photo upload.
How:   Stateless; every method receives the session and the collaborators
       (geocoder, photo store) it needs. Writes are flushed here so that
       constraint violations surface before the route returns; the session
       dependency commits or rolls back the whole request.

Business Rules:
    - A non-admin may own at most one bootcamp. Backed by the unique
      `exclusive_owner_id` column; the pre-check only improves the message.
    - Only the owner or an admin may update, delete or upload a photo.
    - Deleting a bootcamp removes its reviews and courses first.
    - Slug and location are derived before every write that changes the
      name or address.
"""

import logging
import math
import uuid
from typing import Any, Dict, List, Optional

from fastapi import UploadFile
from pydantic.alias_generators import to_camel
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from devcamper.exceptions import BadRequestError, ConflictError, NotFoundError
from devcamper.models.bootcamp import DEFAULT_PHOTO, Bootcamp
from devcamper.models.course import Course
from devcamper.models.review import Review
from devcamper.models.user import User
from devcamper.schemas.bootcamp import BootcampCreate, BootcampRead, BootcampUpdate
from devcamper.schemas.course import CourseRead
from devcamper.services.advanced_results import Eager, ResourceFields
from devcamper.services.common import ensure_owner_or_admin, flush_or_conflict
from devcamper.services.file_service import PhotoStore
from devcamper.services.geocoder import Geocoder
from devcamper.utils import slugify

logger = logging.getLogger(__name__)

# Mean Earth radius in miles
EARTH_RADIUS_MILES = 3963.2

BOOTCAMP_FIELDS = ResourceFields(
    columns={
        "id": Bootcamp.id,
        "user": Bootcamp.user_id,
        "name": Bootcamp.name,
        "slug": Bootcamp.slug,
        "averageCost": Bootcamp.average_cost,
        "averageRating": Bootcamp.average_rating,
        "housing": Bootcamp.housing,
        "jobAssistance": Bootcamp.job_assistance,
        "jobGuarantee": Bootcamp.job_guarantee,
        "acceptGi": Bootcamp.accept_gi,
        "createdAt": Bootcamp.created_at,
        "location.city": Bootcamp.city,
        "location.state": Bootcamp.state,
        "location.zipcode": Bootcamp.zipcode,
        "location.country": Bootcamp.country,
    },
    selectable=[to_camel(name) for name in BootcampRead.model_fields],
)


def serialize_bootcamp(bootcamp: Bootcamp) -> Dict[str, Any]:
    return BootcampRead.from_model(bootcamp).model_dump(by_alias=True, mode="json")


def serialize_courses(courses: List[Course]) -> List[Dict[str, Any]]:
    return [CourseRead.from_model(c).model_dump(by_alias=True, mode="json") for c in courses]


BOOTCAMP_EAGER = (Eager(key="courses", relationship=Bootcamp.courses, serialize=serialize_courses),)


def central_angle(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle angle between two points, in radians (haversine)."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = phi2 - phi1
    d_lambda = math.radians(lng2 - lng1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * math.asin(min(1.0, math.sqrt(a)))


def bounding_box_criteria(lat: float, lng: float, radius: float) -> List[Any]:
    """
    SQL prefilter: a lat/lng box containing the spherical cap.

    The longitude bound is dropped when the cap reaches a pole or wraps
    the antimeridian; the exact check afterwards still applies.
    """
    lat_delta = math.degrees(radius)
    criteria = [
        Bootcamp.latitude.is_not(None),
        Bootcamp.longitude.is_not(None),
        Bootcamp.latitude.between(lat - lat_delta, lat + lat_delta),
    ]
    if abs(lat) + lat_delta >= 90:
        return criteria

    ratio = math.sin(radius) / math.cos(math.radians(lat))
    if ratio >= 1:
        return criteria
    lng_delta = math.degrees(math.asin(ratio))
    if lng - lng_delta >= -180 and lng + lng_delta <= 180:
        criteria.append(Bootcamp.longitude.between(lng - lng_delta, lng + lng_delta))
    return criteria


class BootcampService:
    """
    Responsibilities:
        - get_bootcamp(): single lookup with not-found handling
        - create/update/delete_bootcamp(): ownership and uniqueness rules
        - bootcamps_in_radius(): spherical cap search around a zipcode
        - upload_photo(): validate → resize/store → record filename
    """

    async def get_bootcamp(self, db: AsyncSession, bootcamp_id: uuid.UUID) -> Bootcamp:
        bootcamp = await db.get(Bootcamp, bootcamp_id)
        if bootcamp is None:
            raise NotFoundError(resource="bootcamp", resource_id=str(bootcamp_id))
        return bootcamp

    async def owned_bootcamp_id(
        self, db: AsyncSession, user_id: uuid.UUID
    ) -> Optional[uuid.UUID]:
        return await db.scalar(select(Bootcamp.id).where(Bootcamp.user_id == user_id).limit(1))

    async def _derive_fields(
        self, bootcamp: Bootcamp, geocoder: Geocoder, geocode: bool
    ) -> None:
        """Pre-persist step: slug from name, location from address."""
        bootcamp.slug = slugify(bootcamp.name)
        if not geocode:
            return
        location = await geocoder.geocode(bootcamp.address)
        bootcamp.latitude = location.latitude
        bootcamp.longitude = location.longitude
        bootcamp.formatted_address = location.formatted_address
        bootcamp.street = location.street
        bootcamp.city = location.city
        bootcamp.state = location.state
        bootcamp.zipcode = location.zipcode
        bootcamp.country = location.country

    async def create_bootcamp(
        self,
        db: AsyncSession,
        data: BootcampCreate,
        user: User,
        geocoder: Geocoder,
    ) -> Bootcamp:
        """
        Raises:
            ConflictError: non-admin already owns a bootcamp, or duplicate name
            BadRequestError: address could not be geocoded
        """
        if not user.is_admin:
            existing = await self.owned_bootcamp_id(db, user.id)
            if existing is not None:
                raise ConflictError(
                    message=f"The user with ID {user.id} has already published a bootcamp",
                    context={"user_id": str(user.id), "bootcamp_id": str(existing)},
                )

        bootcamp = Bootcamp(
            **data.model_dump(),
            user_id=user.id,
            exclusive_owner_id=None if user.is_admin else user.id,
        )
        await self._derive_fields(bootcamp, geocoder, geocode=True)

        db.add(bootcamp)
        await flush_or_conflict(db)
        logger.info("Bootcamp created: %s by user %s", bootcamp.id, user.id)
        return bootcamp

    async def update_bootcamp(
        self,
        db: AsyncSession,
        bootcamp_id: uuid.UUID,
        data: BootcampUpdate,
        user: User,
        geocoder: Geocoder,
    ) -> Bootcamp:
        bootcamp = await self.get_bootcamp(db, bootcamp_id)
        ensure_owner_or_admin(bootcamp.user_id, user, "update", "bootcamp", bootcamp.id)

        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        address_changed = "address" in changes and changes["address"] != bootcamp.address
        for key, value in changes.items():
            setattr(bootcamp, key, value)

        await self._derive_fields(bootcamp, geocoder, geocode=address_changed)
        await flush_or_conflict(db)
        logger.info("Bootcamp updated: %s (%s)", bootcamp.id, ", ".join(sorted(changes)))
        return bootcamp

    async def delete_bootcamp(
        self, db: AsyncSession, bootcamp_id: uuid.UUID, user: User
    ) -> None:
        """Removes the bootcamp together with its reviews and courses."""
        bootcamp = await self.get_bootcamp(db, bootcamp_id)
        ensure_owner_or_admin(bootcamp.user_id, user, "delete", "bootcamp", bootcamp.id)

        reviews = await db.execute(delete(Review).where(Review.bootcamp_id == bootcamp.id))
        courses = await db.execute(delete(Course).where(Course.bootcamp_id == bootcamp.id))
        await db.execute(delete(Bootcamp).where(Bootcamp.id == bootcamp.id))
        await db.flush()
        logger.info(
            "Bootcamp deleted: %s (%d courses, %d reviews removed)",
            bootcamp_id,
            courses.rowcount,
            reviews.rowcount,
        )

    async def bootcamps_in_radius(
        self,
        db: AsyncSession,
        zipcode: str,
        distance: float,
        geocoder: Geocoder,
    ) -> List[Bootcamp]:
        """
        Bootcamps within `distance` miles of the zipcode's coordinates.

        How:
            radius = distance / Earth radius (radians); a bounding box narrows
            candidates in SQL, then the haversine angle decides membership.
        """
        if distance <= 0:
            raise BadRequestError(message="Distance must be a positive number", field="distance")

        center = await geocoder.geocode(zipcode)
        radius = distance / EARTH_RADIUS_MILES

        result = await db.scalars(
            select(Bootcamp)
            .where(*bounding_box_criteria(center.latitude, center.longitude, radius))
            .order_by(Bootcamp.created_at.desc(), Bootcamp.id.asc())
        )
        return [
            bootcamp
            for bootcamp in result.all()
            if central_angle(center.latitude, center.longitude, bootcamp.latitude, bootcamp.longitude)
            <= radius
        ]

    async def upload_photo(
        self,
        db: AsyncSession,
        bootcamp_id: uuid.UUID,
        user: User,
        upload: Optional[UploadFile],
        photo_store: PhotoStore,
    ) -> Bootcamp:
        """
        Validation order: bootcamp exists → owner/admin → file present →
        image media type → size → known extension.

        Raises:
            BadRequestError: missing or unacceptable file (record unchanged)
            FileStorageError: resize or write failed (record unchanged)
        """
        bootcamp = await self.get_bootcamp(db, bootcamp_id)
        ensure_owner_or_admin(bootcamp.user_id, user, "update", "bootcamp", bootcamp.id)

        if upload is None:
            raise BadRequestError(message="Please upload a file", field="file")

        content = await upload.read()
        ext = photo_store.validate(upload.filename, upload.content_type, len(content))
        filename = await photo_store.save(str(bootcamp.id), content, ext)

        previous = bootcamp.photo
        bootcamp.photo = filename
        try:
            await db.flush()
        except SQLAlchemyError:
            bootcamp.photo = previous
            if filename != previous:
                await photo_store.cleanup(filename)
            raise

        # A photo with another extension was stored under a different name
        if previous not in (filename, DEFAULT_PHOTO):
            await photo_store.cleanup(previous)

        logger.info("Photo uploaded for bootcamp %s: %s", bootcamp.id, filename)
        return bootcamp


bootcamp_service = BootcampService()
