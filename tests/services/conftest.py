"""Service test fixtures — async SQLite DB, capturing report transport, app client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use the test session factory
    - Outbound error reports are captured by httpx.MockTransport, never sent

Design Decisions:
    - SQLite in-memory with StaticPool: one shared connection, so the schema created
      by the fixture is visible to the sessions opened by requests
    - missing_table_client runs against a database with no tables, the
      "schema not ready" state
"""

import json

import httpx
import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from projects_api.config import Settings
from projects_api.db.base import Base
from projects_api.infrastructure.error_reporter import ErrorReporter
from projects_api.main import create_app
import projects_api.models  # noqa: F401
from tests.services.app_client import REPORT_URL, client_for


def _engine():
    return create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )


@pytest.fixture
async def test_engine():
    engine = _engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def empty_engine():
    engine = _engine()
    yield engine
    await engine.dispose()


@pytest.fixture
def reports():
    """Captured outbound reports.

    Returns dict with:
      - requests: list of {"url": str, "payload": dict}
      - respond: callable(httpx.Request) -> httpx.Response, replace to simulate failures
    """
    captured = {"requests": [], "respond": lambda request: httpx.Response(200)}

    async def handler(request: httpx.Request) -> httpx.Response:
        captured["requests"].append({
            "url": str(request.url),
            "payload": json.loads(request.content),
        })
        return captured["respond"](request)

    captured["transport"] = httpx.MockTransport(handler)
    return captured


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        database_url=None,
        runtime_error_endpoint_url=REPORT_URL,
        board_id=None,
        api_base_url=None,
    )


@pytest.fixture
def reporter(settings, reports):
    return ErrorReporter(
        settings.runtime_error_endpoint_url,
        settings.error_report_timeout_seconds,
        transport=reports["transport"],
    )


@pytest.fixture
def app(settings, reporter):
    return create_app(settings, reporter)


@pytest.fixture
async def client(app, test_engine):
    """FastAPI test client with DB dependency overridden."""
    async with client_for(app, test_engine) as c:
        yield c


@pytest.fixture
async def missing_table_client(app, empty_engine):
    """Client whose database has no TestProjects table."""
    async with client_for(app, empty_engine) as c:
        yield c
