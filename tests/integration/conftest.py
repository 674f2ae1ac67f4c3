"""Integration-test fixtures.

Requires a migrated PostgreSQL (``alembic upgrade head``) reachable at
settings.DATABASE_URL. Skipped unless EXCHANGE_INTEGRATION=1.

All integration tests share a single event-loop so that the module-level
SQLAlchemy async engine pool (created at import time) remains valid across
the entire test session.
"""

import os
import uuid

import pytest
import pytest_asyncio

from src.pm_exchange.application.service import ExchangeService


def pytest_collection_modifyitems(config, items):
    if os.environ.get("EXCHANGE_INTEGRATION") == "1":
        return
    skip = pytest.mark.skip(reason="set EXCHANGE_INTEGRATION=1 to run against PostgreSQL")
    for item in items:
        if "integration" in item.nodeid:
            item.add_marker(skip)


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def exchange() -> ExchangeService:
    return ExchangeService()


@pytest.fixture
def game_id() -> str:
    """Fresh game per test so sequence numbers never collide across runs."""
    return f"it-{uuid.uuid4().hex[:12]}"
