"""Integration-test fixtures.

All integration tests share a single event-loop so that the module-level
SQLAlchemy async engine pool (created at import time) stays valid across the
whole session. Requires PostgreSQL with migrations applied (alembic upgrade head).
"""

import time
import uuid

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from jose import jwt

from config.settings import settings
from src.main import app


def bearer_for(owner_id: str) -> dict[str, str]:
    token = jwt.encode(
        {"sub": owner_id, "exp": int(time.time()) + 3600},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client: keeps the engine pool alive."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture(loop_scope="session")
async def owner_headers() -> dict[str, str]:
    """A fresh owner per test, so tests never see each other's rows."""
    return bearer_for(f"it_{uuid.uuid4().hex[:12]}")
