"""
DevCamper API — Bootcamp Schemas
=================================

What:  Create/update bodies and the read model for bootcamps.
How:   `BootcampRead.from_model` folds the flattened location columns back
       into a GeoJSON-like `location` object.
"""

import uuid
from typing import List, Literal, Optional

from pydantic import EmailStr, Field

from devcamper.models.bootcamp import Bootcamp
from devcamper.schemas.common import CamelModel, UTCDateTime

Career = Literal[
    "Web Development",
    "Mobile Development",
    "UI/UX",
    "Data Science",
    "Business",
    "Other",
]

URL_PATTERN = r"^https?://[^\s/$.?#].[^\s]*$"


class BootcampCreate(CamelModel):
    name: str = Field(min_length=1, max_length=50)
    description: str = Field(min_length=1, max_length=500)
    website: Optional[str] = Field(default=None, pattern=URL_PATTERN, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=20)
    email: Optional[EmailStr] = None
    address: str = Field(min_length=1, max_length=255)
    careers: List[Career] = Field(min_length=1)
    housing: bool = False
    job_assistance: bool = False
    job_guarantee: bool = False
    accept_gi: bool = False


class BootcampUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    description: Optional[str] = Field(default=None, min_length=1, max_length=500)
    website: Optional[str] = Field(default=None, pattern=URL_PATTERN, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=20)
    email: Optional[EmailStr] = None
    address: Optional[str] = Field(default=None, min_length=1, max_length=255)
    careers: Optional[List[Career]] = Field(default=None, min_length=1)
    housing: Optional[bool] = None
    job_assistance: Optional[bool] = None
    job_guarantee: Optional[bool] = None
    accept_gi: Optional[bool] = None


class LocationRead(CamelModel):
    type: str = "Point"
    # GeoJSON order: [longitude, latitude]
    coordinates: List[float]
    formatted_address: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zipcode: Optional[str] = None
    country: Optional[str] = None


class BootcampSummary(CamelModel):
    """Compact form embedded in course and review listings."""

    id: uuid.UUID
    name: str
    description: str


class BootcampRead(CamelModel):
    id: uuid.UUID
    user: uuid.UUID
    name: str
    slug: str
    description: str
    website: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: str
    location: Optional[LocationRead] = None
    careers: List[str]
    average_rating: Optional[float] = None
    average_cost: Optional[int] = None
    photo: str
    housing: bool
    job_assistance: bool
    job_guarantee: bool
    accept_gi: bool
    created_at: UTCDateTime

    @classmethod
    def from_model(cls, bootcamp: Bootcamp) -> "BootcampRead":
        location = None
        if bootcamp.latitude is not None and bootcamp.longitude is not None:
            location = LocationRead(
                coordinates=[bootcamp.longitude, bootcamp.latitude],
                formatted_address=bootcamp.formatted_address,
                street=bootcamp.street,
                city=bootcamp.city,
                state=bootcamp.state,
                zipcode=bootcamp.zipcode,
                country=bootcamp.country,
            )
        return cls(
            id=bootcamp.id,
            user=bootcamp.user_id,
            name=bootcamp.name,
            slug=bootcamp.slug,
            description=bootcamp.description,
            website=bootcamp.website,
            phone=bootcamp.phone,
            email=bootcamp.email,
            address=bootcamp.address,
            location=location,
            careers=list(bootcamp.careers or []),
            average_rating=bootcamp.average_rating,
            average_cost=bootcamp.average_cost,
            photo=bootcamp.photo,
            housing=bootcamp.housing,
            job_assistance=bootcamp.job_assistance,
            job_guarantee=bootcamp.job_guarantee,
            accept_gi=bootcamp.accept_gi,
            created_at=bootcamp.created_at,
        )
