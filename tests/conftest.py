"""Shared test fixtures for all test groups.

Every test gets its own in-memory SQLite database; the upsert statements
used in production have SQLite equivalents, so the same code paths run.
"""

from datetime import datetime, timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine

from tracking_receiver.core.auth import ApiKeyGate
from tracking_receiver.core.config import Settings
from tracking_receiver.db import create_engine, create_session_factory, create_tables
from tracking_receiver.services.credential_store import CredentialStore
from tracking_receiver.services.ingest_service import IngestService
from tracking_receiver.services.lookup_service import LookupService
from tracking_receiver.services.record_store import TrackingRecordStore

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"


class StepClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime = datetime(2026, 1, 1, 12, 0, 0)):
        self.current = start

    def __call__(self) -> datetime:
        now = self.current
        self.current = now + timedelta(seconds=1)
        return now


@pytest.fixture
def settings() -> Settings:
    return Settings(database_url=TEST_DB_URL, debug=False, create_tables_on_startup=True)


@pytest.fixture
async def engine() -> AsyncEngine:
    engine = create_engine(TEST_DB_URL)
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def credentials(session_factory) -> CredentialStore:
    return CredentialStore(session_factory)


@pytest.fixture
def records(session_factory) -> TrackingRecordStore:
    return TrackingRecordStore(session_factory)


@pytest.fixture
def gate(credentials) -> ApiKeyGate:
    return ApiKeyGate(credentials)


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def ingest_service(gate, records, clock) -> IngestService:
    return IngestService(gate, records, clock=clock)


@pytest.fixture
def lookup_service(records) -> LookupService:
    return LookupService(records)


@pytest.fixture
async def api_key(credentials) -> str:
    """A freshly rotated key stored in the test database."""
    return await credentials.rotate_key()


@pytest.fixture
def auth_headers(api_key) -> dict[str, str]:
    return {"X-API-Key": api_key}
