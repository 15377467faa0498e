"""
DevCamper API — Error Normalizer and Health Tests
==================================================

What:  Every failure leaves the app as {"success": false, "message": ...};
       development mode adds the error details and stack. Also covers the
       request-id header and the health endpoint.
"""

import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from devcamper.exceptions import InternalError
from devcamper.main import create_app
from devcamper.services.circuit_breaker import CircuitBreaker
from helpers import FakeGeocoder


@pytest_asyncio.fixture
async def dev_app(test_settings, fake_geocoder):
    settings = test_settings.model_copy(update={"environment": "development"})
    application = create_app(settings=settings, geocoder=fake_geocoder)
    await application.state.database.create_all()
    yield application
    await application.state.database.dispose()


@pytest_asyncio.fixture
async def dev_client(dev_app):
    async with AsyncClient(transport=ASGITransport(app=dev_app), base_url="http://test") as c:
        yield c


class TestErrorEnvelope:

    @pytest.mark.asyncio
    async def test_unmatched_route(self, client):
        response = await client.get("/api/v1/nothing-here")
        assert response.status_code == 404
        assert response.json() == {
            "success": False,
            "message": "Can't find /api/v1/nothing-here on this server!",
        }

    @pytest.mark.asyncio
    async def test_malformed_id_is_bad_request(self, client):
        response = await client.get("/api/v1/bootcamps/not-a-uuid")
        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "message": "Invalid bootcamp_id: not-a-uuid",
        }

    @pytest.mark.asyncio
    async def test_details_hidden_outside_development(self, client):
        response = await client.get(f"/api/v1/bootcamps/{uuid.uuid4()}")
        assert set(response.json()) == {"success", "message"}

    @pytest.mark.asyncio
    async def test_development_includes_error_and_stack(self, dev_client):
        missing = uuid.uuid4()
        response = await dev_client.get(
            f"/api/v1/bootcamps/{missing}", headers={"X-Request-ID": "req-42"}
        )

        body = response.json()
        assert response.status_code == 404
        assert body["success"] is False
        assert body["message"] == f"Bootcamp not found with id of {missing}"
        assert body["error"]["type"] == "NotFoundError"
        assert body["error"]["statusCode"] == 404
        assert body["error"]["requestId"] == "req-42"
        assert "NotFoundError" in body["stack"]

    @pytest.mark.asyncio
    async def test_unexpected_error_is_generic_500(self, app):
        async def explode():
            raise RuntimeError("database password is hunter2")

        app.add_api_route("/explode", explode)
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            response = await c.get("/explode")

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Something went very wrong!"}

    @pytest.mark.asyncio
    async def test_internal_error_message_hidden(self, app, client):
        async def fail():
            raise InternalError("temp dir /var/lib/devcamper is read-only")

        app.add_api_route("/internal", fail)
        response = await client.get("/internal")

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Something went very wrong!"}

    @pytest.mark.asyncio
    async def test_internal_error_message_shown_in_development(self, dev_app, dev_client):
        async def fail():
            raise InternalError("temp dir /var/lib/devcamper is read-only")

        dev_app.add_api_route("/internal", fail)
        response = await dev_client.get("/internal")

        assert response.status_code == 500
        assert response.json()["message"] == "temp dir /var/lib/devcamper is read-only"
        assert response.json()["error"]["type"] == "InternalError"

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, client):
        response = await client.get("/health", headers={"X-Request-ID": "trace-me"})
        assert response.headers["X-Request-ID"] == "trace-me"

    @pytest.mark.asyncio
    async def test_request_id_generated(self, client):
        response = await client.get("/api/v1/bootcamps")
        assert response.headers["X-Request-ID"]


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy(self, client):
        response = await client.get("/health")
        body = response.json()
        assert response.status_code == 200
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["geocoder"] == "available"

    @pytest.mark.asyncio
    async def test_degraded_when_geocoder_circuit_open(self, test_settings):
        geocoder = FakeGeocoder()
        geocoder.circuit_breaker = CircuitBreaker(failure_threshold=1, recovery_timeout=60)
        geocoder.circuit_breaker.record_failure()
        application = create_app(settings=test_settings, geocoder=geocoder)

        async with AsyncClient(
            transport=ASGITransport(app=application), base_url="http://test"
        ) as c:
            response = await c.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "degraded"
        assert response.json()["geocoder"] == "circuit_open"
        await application.state.database.dispose()
