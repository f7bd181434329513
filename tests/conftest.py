import os
import tempfile
from pathlib import Path

# Must be set before tutorial_service.core.config is imported
TEST_DB = Path(tempfile.gettempdir()) / f"tutorial_service_test_{os.getpid()}.db"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{TEST_DB}"
os.environ["CREATE_SCHEMA"] = "false"

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from tutorial_service.core.database import AsyncSessionLocal, drop_models, init_models
from tutorial_service.main import app
from tutorial_service.services.event_manager import EventManager
from tutorial_service.services.person_manager import PersonManager


@pytest_asyncio.fixture(autouse=True)
async def fresh_schema():
    """Every test starts from empty tables"""
    await drop_models()
    await init_models()
    yield


@pytest.fixture
def person_manager() -> PersonManager:
    return PersonManager(AsyncSessionLocal)


@pytest.fixture
def event_manager() -> EventManager:
    return EventManager(AsyncSessionLocal)


@pytest_asyncio.fixture
async def client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


def pytest_sessionfinish(session, exitstatus):
    TEST_DB.unlink(missing_ok=True)
