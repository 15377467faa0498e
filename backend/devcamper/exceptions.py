"""
DevCamper API — Custom Exception Hierarchy
===========================================

What:  Application-specific exceptions, one per failure category.
How:   Each exception carries a client-safe message, an optional context dict
       (logged, never returned outside development), an HTTP status code and
       an `is_operational` flag. The global handlers registered in main.py turn
       them into `{"success": false, "message": ...}` responses.
Who:   Raised by services, auth dependencies and middleware.

Exception Hierarchy:
    DevCamperError (base)
    ├── BadRequestError          → 400 (malformed input, wrong media type)
    ├── UnauthorizedError        → 401 (missing/invalid credential, stale password)
    │   ├── InvalidTokenError
    │   └── ExpiredTokenError
    ├── ForbiddenError           → 403 (role or ownership check failed)
    ├── NotFoundError            → 404
    ├── ConflictError            → 409 (uniqueness violation)
    ├── RateLimitExceededError   → 429
    ├── InternalError            → 500 (upload/processing/storage failure)
    │   └── FileStorageError
    ├── GeocoderError            → 503
    └── CircuitBreakerOpenError  → 503
"""

from typing import Any, Dict, Optional


class DevCamperError(Exception):
    """
    Base exception for all DevCamper application errors.

    Attributes:
        message:         User-facing error description
        context:         Additional debug info (logged, not returned in production)
        status_code:     HTTP status the error normalizer responds with
        is_operational:  Expected failure whose message is safe to show
    """

    status_code: int = 500
    is_operational: bool = True

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class BadRequestError(DevCamperError):
    """
    Raised when client input cannot be processed as sent.

    When: Unknown filter field, non-image upload, missing file, bad reset token.
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Bad request",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class UnauthorizedError(DevCamperError):
    """Raised when the request carries no usable credential."""

    status_code = 401

    def __init__(
        self,
        message: str = "Not authorized to access this route",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidTokenError(UnauthorizedError):
    """Signature or structure of a bearer token is wrong."""

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Invalid token. Please log in again.", context=context)


class ExpiredTokenError(UnauthorizedError):
    """Bearer token was valid but its `exp` has passed."""

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            message="Your token has expired. Please log in again.", context=context
        )


class ForbiddenError(DevCamperError):
    """
    Raised when an authenticated principal may not perform the action.

    When: Role not in a route's allowed set; neither owner nor admin.
    """

    status_code = 403

    def __init__(
        self,
        message: str = "Not authorized to perform this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(DevCamperError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing records; services convert that into
    this exception so handlers stay free of status-code logic.
    """

    status_code = 404

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource.capitalize()} not found with id of {resource_id}"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(DevCamperError):
    """
    Raised on uniqueness violations.

    When: Second bootcamp for a publisher, second review of a bootcamp by the
    same user, duplicate email or bootcamp name.
    """

    status_code = 409

    def __init__(
        self,
        message: str = "Duplicate field value entered",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(DevCamperError):
    """Raised when a client exceeds the per-IP request rate limit."""

    status_code = 429

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Too many requests. Please wait {retry_after} seconds before retrying."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class InternalError(DevCamperError):
    """
    Raised when an internal step fails. Its message may name internals, so
    outside development the client only sees the generic message.
    """

    status_code = 500
    is_operational = False

    def __init__(
        self,
        message: str = "An internal error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(InternalError):
    """
    Raised when image processing or file system operations fail.

    Recovery: the partially written file (if any) is removed and the
    resource record is left untouched.
    """

    is_operational = True

    def __init__(
        self,
        message: str = "Problem with file upload",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class GeocoderError(DevCamperError):
    """Raised when the geocoding provider fails after all retries."""

    status_code = 503

    def __init__(
        self,
        message: str = "Geocoding service is temporarily unavailable",
        retry_after: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if retry_after:
            ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class CircuitBreakerOpenError(DevCamperError):
    """
    Raised when the geocoder circuit breaker is OPEN.

    How circuit breaker works:
        CLOSED (normal) → failures increment counter
        → After N failures → OPEN (reject all calls for M seconds)
        → After M seconds → HALF-OPEN (allow one test call)
        → If test succeeds → CLOSED; if it fails → OPEN again
    """

    status_code = 503

    def __init__(
        self,
        recovery_time: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            "Geocoding service is temporarily unavailable due to repeated failures. "
            f"Please retry in approximately {recovery_time} seconds."
        )
        ctx = context or {}
        ctx["recovery_time"] = recovery_time
        super().__init__(message=message, context=ctx)
        self.recovery_time = recovery_time
