import os
from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from dotenv import load_dotenv
from httpx import ASGITransport, AsyncClient

# Load environment variables from .env file
load_dotenv()

# Tests never talk to Firestore
os.environ["STORE_BACKEND"] = "memory"
os.environ.setdefault("LOG_FORMAT", "console")

from healthsync.core.redis_client import CacheManager
from healthsync.dependencies import (
    get_cache_manager,
    get_clock,
    get_current_user_claims,
    get_store,
    get_timezone,
)
from healthsync.main import app
from healthsync.store import USERS, InMemoryDocumentStore

# Tuesday morning, far from any day boundary
FROZEN_NOW = datetime(2026, 3, 10, 9, 30, tzinfo=UTC)

PATIENT_UID = "patient-1"
DOCTOR_UID = "doctor-1"


class FrozenClock:
    """Clock that only moves when a test moves it."""

    def __init__(self, now: datetime = FROZEN_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


async def seed_user(store: InMemoryDocumentStore, uid: str, **fields) -> dict:
    """Insert a user document with sane defaults."""
    document = {
        "uid": uid,
        "email": f"{uid}@example.com",
        "name": "Test User",
        "role": "patient",
        "xp": 0,
        "streak": 0,
        "bestStreak": 0,
        "lastActive": None,
        "healthScore": 0,
        "createdAt": FROZEN_NOW - timedelta(days=30),
        "updatedAt": FROZEN_NOW - timedelta(days=30),
        **fields,
    }
    await store.set_document(USERS, uid, document)
    return document


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def mock_redis() -> MagicMock:
    redis_client = MagicMock()
    redis_client.get.return_value = None
    return redis_client


@pytest.fixture
def cache_manager(mock_redis: MagicMock) -> CacheManager:
    return CacheManager(redis_client=mock_redis)


@pytest.fixture
def claims() -> dict:
    """Claims of the signed-in user; tests may swap the uid."""
    return {"uid": PATIENT_UID, "email": f"{PATIENT_UID}@example.com", "role": None}


@pytest_asyncio.fixture
async def patient(store: InMemoryDocumentStore) -> dict:
    return await seed_user(store, PATIENT_UID)


@pytest_asyncio.fixture
async def doctor(store: InMemoryDocumentStore) -> dict:
    return await seed_user(store, DOCTOR_UID, role="doctor", name="Doctor Who")


@pytest_asyncio.fixture
async def client(
    store: InMemoryDocumentStore,
    clock: FrozenClock,
    cache_manager: CacheManager,
    claims: dict,
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_cache_manager] = lambda: cache_manager
    app.dependency_overrides[get_timezone] = lambda: UTC
    app.dependency_overrides[get_current_user_claims] = lambda: claims

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict:
    """Bearer header; the token itself is never verified in tests."""
    return {"Authorization": "Bearer test-token"}
