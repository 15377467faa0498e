"""
DevCamper API — Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets its own application built by `create_app()` with an
       in-memory SQLite database (aiosqlite, foreign keys on), a fake
       geocoder and a temporary upload directory. HTTP tests talk to it
       through an httpx AsyncClient over ASGITransport.

Fixture Hierarchy (all function-scoped):
    test_settings ─┐
    fake_geocoder ─┼── app ──┬── client
                   │         ├── make_user      (persisted User factory)
                   │         ├── auth_headers   (Bearer header for a User)
                   │         └── db_session     (direct database access)
    png_bytes      (real PNG for upload tests)
"""

import os
import tempfile
from io import BytesIO
from typing import Dict, Optional
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from PIL import Image

# Override settings for testing BEFORE any app imports: importing
# devcamper.main builds a default application from the environment
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["JWT_SECRET"] = "test-secret-not-for-production-0123456789abcdef"
os.environ["GEOCODER_API_KEY"] = "test-key-not-real"
os.environ["FILE_UPLOAD_PATH"] = tempfile.mkdtemp(prefix="devcamper_test_")
os.environ["LOG_LEVEL"] = "WARNING"

from devcamper.config import Settings  # noqa: E402
from devcamper.main import create_app  # noqa: E402
from devcamper.models.user import User  # noqa: E402
from devcamper.services.user_service import user_service  # noqa: E402
from helpers import FakeGeocoder  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Application Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        environment="test",
        database_url="sqlite+aiosqlite://",
        jwt_secret="test-secret-not-for-production-0123456789abcdef",
        geocoder_api_key="test-key-not-real",
        file_upload_path=str(tmp_path / "uploads"),
        rate_limit_requests=10_000,
        retry_min_wait=0,
        retry_max_wait=0,
        log_level="WARNING",
    )


@pytest.fixture
def fake_geocoder() -> FakeGeocoder:
    return FakeGeocoder()


@pytest_asyncio.fixture
async def app(test_settings, fake_geocoder):
    """A fresh application with its own in-memory database."""
    application = create_app(settings=test_settings, geocoder=fake_geocoder)
    await application.state.database.create_all()
    application.state.photo_store.ensure_directory()
    yield application
    await application.state.database.dispose()


@pytest_asyncio.fixture
async def client(app):
    """
    HTTPX AsyncClient routed straight into the app.

    Usage:
        async def test_health(client):
            response = await client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest_asyncio.fixture
async def db_session(app):
    async with app.state.database.session_factory() as session:
        yield session


@pytest.fixture
def make_user(app):
    """
    Factory persisting a user through UserService.

    Usage:
        publisher = await make_user("publisher")
    """

    async def _make(
        role: str = "user",
        email: Optional[str] = None,
        password: str = "123456",
        name: Optional[str] = None,
    ) -> User:
        async with app.state.database.session_factory() as session:
            user = await user_service.create_user(
                session,
                name or f"{role.title()} Tester",
                email or f"{role}-{uuid4().hex[:8]}@example.com",
                password,
                role,
            )
            await session.commit()
            return user

    return _make


@pytest.fixture
def auth_headers(app):
    """Bearer header for a user, signed with the app's token codec."""

    def _headers(user: User, **issue_kwargs) -> Dict[str, str]:
        token = app.state.token_codec.issue(
            principal_id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            **issue_kwargs,
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def png_bytes() -> bytes:
    """A real 600x400 RGBA PNG."""
    buffer = BytesIO()
    Image.new("RGBA", (600, 400), (30, 120, 200, 255)).save(buffer, format="PNG")
    return buffer.getvalue()
