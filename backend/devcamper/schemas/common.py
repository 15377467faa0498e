"""
DevCamper API — Shared Pydantic Schemas
========================================

What:  Base model configuration and the response envelopes shared by every
       resource.
How:   Python attributes are snake_case; the JSON contract is camelCase
       (`averageCost`, `createdAt`). `CamelModel` maps between the two and
       accepts either spelling on input.

Envelope shapes:
    success:  {"success": true, "data": ...}
    list:     {"success": true, "count": n, "pagination": {...}, "data": [...]}
    failure:  {"success": false, "message": "..."}
"""

from datetime import datetime
from typing import Annotated, Any, Generic, List, Optional, TypeVar

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from devcamper.utils import as_utc

T = TypeVar("T")

# SQLite hands timestamps back naive; responses always carry UTC
UTCDateTime = Annotated[datetime, AfterValidator(as_utc)]


class CamelModel(BaseModel):
    """Base for every request/response model exposed over HTTP."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Envelope(BaseModel, Generic[T]):
    """Successful single-item (or single-value) response."""

    success: bool = True
    data: T


class ListEnvelope(BaseModel):
    """Documentation model for list responses produced by the query translator."""

    success: bool = True
    count: int = Field(description="Number of items in this page")
    pagination: dict = Field(
        default_factory=dict,
        description="Optional `prev`/`next` objects, each {page, limit}",
    )
    data: List[dict]


class TokenResponse(BaseModel):
    success: bool = True
    token: str


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.

    Fields:
        success: Always false
        message: Human-readable description
        error:   Exception type and context (development only)
        stack:   Formatted traceback (development only)
    """

    success: bool = False
    message: str
    error: Optional[Any] = None
    stack: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response showing service and dependency status."""

    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    geocoder: str = Field(description="Geocoder status: available, circuit_open")
    uptime_seconds: float = Field(description="Seconds since service started")
