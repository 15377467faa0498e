"""
DevCamper API — Geocoder
=========================

What:  Turns a free-form address (or a zipcode) into coordinates plus the
       structured address parts stored on a bootcamp.
How:   `Geocoder` is the contract; `MapQuestGeocoder` calls the MapQuest
       address endpoint through an httpx AsyncClient.
Who:   BootcampService on create/update (address) and radius search (zipcode).

Resilience Strategy:
    1. Tenacity retry with exponential backoff + jitter for transient failures
       (transport errors, 429 and 5xx responses)
    2. Circuit breaker so a dead provider fails fast instead of stacking
       timeouts on every bootcamp write
    3. Per-request timeout from settings

Error Handling Chain:
    call fails → tenacity retries (N attempts with backoff)
    → all retries fail → circuit breaker failure recorded → GeocoderError (503)
    → threshold reached → CircuitBreakerOpenError (503) until recovery
    provider answered but found nothing → BadRequestError (400)
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from devcamper.config import Settings
from devcamper.exceptions import BadRequestError, GeocoderError
from devcamper.services.circuit_breaker import CircuitBreaker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeocodeResult:
    latitude: float
    longitude: float
    formatted_address: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zipcode: Optional[str] = None
    country: Optional[str] = None


class Geocoder(ABC):
    """
    Abstract base class for geocoding providers.

    Implementations must:
        - Return a GeocodeResult for the best match
        - Raise BadRequestError when the query matches nothing
        - Raise GeocoderError when the provider cannot be reached
    """

    circuit_breaker: Optional[CircuitBreaker] = None

    @abstractmethod
    async def geocode(self, query: str) -> GeocodeResult:
        ...

    @property
    def status(self) -> str:
        if self.circuit_breaker is not None and self.circuit_breaker.is_open:
            return "circuit_open"
        return "available"

    async def close(self) -> None:
        """Release network resources (called on application shutdown)."""


def _is_transient(exc: BaseException) -> bool:
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status == 429 or status >= 500
    return False


class MapQuestGeocoder(Geocoder):
    """MapQuest Geocoding API v1 (`/geocoding/v1/address`)."""

    def __init__(
        self,
        api_key: str,
        base_url: str,
        timeout: float = 10.0,
        max_attempts: int = 3,
        min_wait: float = 1,
        max_wait: float = 5,
        circuit_breaker: Optional[CircuitBreaker] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.max_attempts = max_attempts
        self.min_wait = min_wait
        self.max_wait = max_wait
        self.circuit_breaker = circuit_breaker or CircuitBreaker(name="geocoder")
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings) -> "MapQuestGeocoder":
        breaker = CircuitBreaker(
            failure_threshold=settings.cb_failure_threshold,
            recovery_timeout=settings.cb_recovery_timeout,
            name="geocoder",
        )
        logger.info(
            "MapQuestGeocoder initialized, circuit_breaker(threshold=%d, recovery=%ds)",
            settings.cb_failure_threshold,
            settings.cb_recovery_timeout,
        )
        return cls(
            api_key=settings.geocoder_api_key,
            base_url=settings.geocoder_base_url,
            timeout=settings.geocoder_timeout,
            max_attempts=settings.retry_max_attempts,
            min_wait=settings.retry_min_wait,
            max_wait=settings.retry_max_wait,
            circuit_breaker=breaker,
        )

    async def geocode(self, query: str) -> GeocodeResult:
        """
        Flow:
            1. Check circuit breaker → may raise CircuitBreakerOpenError
            2. Call MapQuest with retry logic
            3. Record success/failure in circuit breaker
            4. Pick the first location of the first result

        Raises:
            CircuitBreakerOpenError: too many recent failures
            GeocoderError: provider failed after all retry attempts
            BadRequestError: provider answered with no usable location
        """
        self.circuit_breaker.can_execute()
        start_time = time.time()

        try:
            payload = await self._call_with_retry(query)
        except (httpx.HTTPError, ValueError) as e:
            self.circuit_breaker.record_failure()
            logger.error(
                "Geocoding failed after %d attempts: %s: %s",
                self.max_attempts,
                type(e).__name__,
                str(e),
            )
            raise GeocoderError(
                retry_after=self.circuit_breaker.recovery_timeout,
                context={"error_type": type(e).__name__, "attempts": self.max_attempts},
            )

        self.circuit_breaker.record_success()
        logger.info("Geocoded %r in %.0fms", query, (time.time() - start_time) * 1000)
        return self._parse(query, payload)

    async def _call_with_retry(self, query: str) -> Dict[str, Any]:
        async for attempt in AsyncRetrying(
            retry=retry_if_exception(_is_transient),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential_jitter(
                initial=self.min_wait, max=self.max_wait, jitter=1
            ),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                response = await self._client.get(
                    self.base_url,
                    params={"key": self.api_key, "location": query, "maxResults": 1},
                )
                response.raise_for_status()
                return response.json()

    @staticmethod
    def _parse(query: str, payload: Dict[str, Any]) -> GeocodeResult:
        status = payload.get("info", {}).get("statuscode", 0)
        if status != 0:
            # 400 = malformed location, 403 = bad key, 500 = provider error
            messages = payload.get("info", {}).get("messages", [])
            if status == 400:
                raise BadRequestError(
                    message=f"Could not geocode location '{query}'",
                    field="address",
                    context={"provider_messages": messages},
                )
            raise GeocoderError(context={"statuscode": status, "provider_messages": messages})

        results = payload.get("results") or []
        locations = results[0].get("locations") if results else None
        if not locations:
            raise BadRequestError(
                message=f"Could not geocode location '{query}'", field="address"
            )

        loc = locations[0]
        lat_lng = loc.get("latLng") or loc.get("displayLatLng") or {}
        if "lat" not in lat_lng or "lng" not in lat_lng:
            raise BadRequestError(
                message=f"Could not geocode location '{query}'", field="address"
            )

        street = loc.get("street") or None
        city = loc.get("adminArea5") or None
        state = loc.get("adminArea3") or None
        zipcode = loc.get("postalCode") or None
        country = loc.get("adminArea1") or None
        state_zip = " ".join(p for p in (state, zipcode) if p)
        formatted = ", ".join(p for p in (street, city, state_zip, country) if p) or None

        return GeocodeResult(
            latitude=float(lat_lng["lat"]),
            longitude=float(lat_lng["lng"]),
            formatted_address=formatted,
            street=street,
            city=city,
            state=state,
            zipcode=zipcode,
            country=country,
        )

    async def close(self) -> None:
        await self._client.aclose()
