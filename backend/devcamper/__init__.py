"""
DevCamper API — Application Package Initializer
================================================

What: Marks the `devcamper` directory as a Python package.
Who:  Used by uvicorn (`devcamper.main:app`), Alembic and pytest.

Architecture Note:
    The backend is split into layers:

    ┌─────────────────────────────────────┐
    │      Routes + Middleware (HTTP)     │  ← status codes, cookies, headers
    ├─────────────────────────────────────┤
    │   Auth gates / Query translator     │  ← FastAPI dependencies
    ├─────────────────────────────────────┤
    │      Services (Business Rules)      │  ← ownership, uniqueness, cascades
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes never touch the ORM directly; services never see Request objects.
"""

__version__ = "1.0.0"
