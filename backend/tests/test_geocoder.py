"""
DevCamper API — Geocoder Unit Tests (Mocked Transport)
=======================================================

What:  Tests for MapQuestGeocoder and its CircuitBreaker.
How:   httpx.MockTransport answers in place of MapQuest; a fake clock drives
       the breaker's recovery timer.

What we test:
    ✅ A MapQuest payload maps onto GeocodeResult
    ✅ Empty or rejected lookups are client errors (400)
    ✅ Transient failures are retried
    ✅ Exhausted retries open the circuit breaker
    ❌ Real API calls
"""

import httpx
import pytest

from devcamper.exceptions import BadRequestError, CircuitBreakerOpenError, GeocoderError
from devcamper.services.circuit_breaker import CircuitBreaker
from devcamper.services.geocoder import MapQuestGeocoder

BASE_URL = "https://geocoder.test/geocoding/v1/address"

BOSTON_PAYLOAD = {
    "info": {"statuscode": 0, "messages": []},
    "results": [
        {
            "locations": [
                {
                    "street": "233 Bay State Rd",
                    "adminArea5": "Boston",
                    "adminArea3": "MA",
                    "postalCode": "02215",
                    "adminArea1": "US",
                    "latLng": {"lat": 42.350846, "lng": -71.10287},
                }
            ]
        }
    ],
}


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def make_geocoder(handler, breaker=None, max_attempts=3):
    return MapQuestGeocoder(
        api_key="test-key",
        base_url=BASE_URL,
        max_attempts=max_attempts,
        min_wait=0,
        max_wait=0,
        circuit_breaker=breaker or CircuitBreaker(failure_threshold=2, recovery_timeout=30),
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


class TestCircuitBreaker:
    """Tests for the CircuitBreaker resilience pattern."""

    def test_initial_state_is_closed(self):
        cb = CircuitBreaker(failure_threshold=5, recovery_timeout=60)
        assert cb.state == "closed"
        assert cb.failure_count == 0
        assert cb.is_open is False

    def test_stays_closed_under_threshold(self):
        cb = CircuitBreaker(failure_threshold=5, recovery_timeout=60)
        for _ in range(4):
            cb.record_failure()
        assert cb.state == "closed"
        assert cb.can_execute() is True

    def test_open_circuit_rejects_calls(self):
        clock = FakeClock()
        cb = CircuitBreaker(failure_threshold=3, recovery_timeout=60, clock=clock)
        for _ in range(3):
            cb.record_failure()
        clock.now += 15

        assert cb.state == "open"
        assert cb.is_open is True
        with pytest.raises(CircuitBreakerOpenError) as exc_info:
            cb.can_execute()
        assert exc_info.value.recovery_time == 45

    def test_success_resets_failure_count(self):
        cb = CircuitBreaker(failure_threshold=5, recovery_timeout=60)
        cb.record_failure()
        cb.record_failure()
        assert cb.failure_count == 2

        cb.record_success()
        assert cb.failure_count == 0
        assert cb.state == "closed"

    def test_half_open_after_recovery_timeout(self):
        clock = FakeClock()
        cb = CircuitBreaker(failure_threshold=1, recovery_timeout=60, clock=clock)
        cb.record_failure()

        clock.now += 60
        assert cb.is_open is False
        assert cb.can_execute() is True
        assert cb.state == "half_open"

    def test_half_open_success_closes(self):
        clock = FakeClock()
        cb = CircuitBreaker(failure_threshold=1, recovery_timeout=60, clock=clock)
        cb.record_failure()
        clock.now += 61
        cb.can_execute()

        cb.record_success()
        assert cb.state == "closed"
        assert cb.failure_count == 0

    def test_half_open_failure_reopens(self):
        clock = FakeClock()
        cb = CircuitBreaker(failure_threshold=3, recovery_timeout=60, clock=clock)
        for _ in range(3):
            cb.record_failure()
        clock.now += 61
        cb.can_execute()

        cb.record_failure()
        assert cb.state == "open"
        with pytest.raises(CircuitBreakerOpenError):
            cb.can_execute()


class TestMapQuestGeocoder:

    @pytest.mark.asyncio
    async def test_parses_first_location(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=BOSTON_PAYLOAD)

        geocoder = make_geocoder(handler)
        result = await geocoder.geocode("233 Bay State Rd Boston MA 02215")

        assert result.latitude == pytest.approx(42.350846)
        assert result.longitude == pytest.approx(-71.10287)
        assert result.city == "Boston"
        assert result.state == "MA"
        assert result.zipcode == "02215"
        assert result.country == "US"
        assert result.formatted_address == "233 Bay State Rd, Boston, MA 02215, US"

        params = seen[0].url.params
        assert params["key"] == "test-key"
        assert params["location"] == "233 Bay State Rd Boston MA 02215"
        await geocoder.close()

    @pytest.mark.asyncio
    async def test_no_locations_is_bad_request(self):
        payload = {"info": {"statuscode": 0}, "results": [{"locations": []}]}
        geocoder = make_geocoder(lambda request: httpx.Response(200, json=payload))

        with pytest.raises(BadRequestError, match="Could not geocode location 'nowhere'"):
            await geocoder.geocode("nowhere")
        assert geocoder.circuit_breaker.failure_count == 0

    @pytest.mark.asyncio
    async def test_rejected_location_is_bad_request(self):
        payload = {"info": {"statuscode": 400, "messages": ["Illegal argument from request"]}}
        geocoder = make_geocoder(lambda request: httpx.Response(200, json=payload))

        with pytest.raises(BadRequestError):
            await geocoder.geocode("???")

    @pytest.mark.asyncio
    async def test_provider_error_status(self):
        payload = {"info": {"statuscode": 403, "messages": ["bad key"]}}
        geocoder = make_geocoder(lambda request: httpx.Response(200, json=payload))

        with pytest.raises(GeocoderError):
            await geocoder.geocode("Boston")

    @pytest.mark.asyncio
    async def test_retries_transient_failures(self):
        responses = [httpx.Response(500), httpx.Response(429), httpx.Response(200, json=BOSTON_PAYLOAD)]
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return responses[len(calls) - 1]

        geocoder = make_geocoder(handler)
        result = await geocoder.geocode("Boston")

        assert len(calls) == 3
        assert result.city == "Boston"
        assert geocoder.circuit_breaker.failure_count == 0

    @pytest.mark.asyncio
    async def test_client_errors_not_retried(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(401)

        geocoder = make_geocoder(handler)
        with pytest.raises(GeocoderError):
            await geocoder.geocode("Boston")
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_exhausted_retries_record_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        geocoder = make_geocoder(handler)
        with pytest.raises(GeocoderError) as exc_info:
            await geocoder.geocode("Boston")

        assert exc_info.value.status_code == 503
        assert geocoder.circuit_breaker.failure_count == 1
        assert geocoder.status == "available"

    @pytest.mark.asyncio
    async def test_open_circuit_fails_fast(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(503)

        geocoder = make_geocoder(handler, max_attempts=1)
        for _ in range(2):
            with pytest.raises(GeocoderError):
                await geocoder.geocode("Boston")
        assert geocoder.status == "circuit_open"

        with pytest.raises(CircuitBreakerOpenError):
            await geocoder.geocode("Boston")
        assert len(calls) == 2
