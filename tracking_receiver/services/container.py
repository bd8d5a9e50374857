"""Explicit wiring of the service graph, built once at startup."""

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from tracking_receiver.core.auth import ApiKeyGate
from tracking_receiver.core.config import Settings
from tracking_receiver.services.credential_store import CredentialStore
from tracking_receiver.services.ingest_service import IngestService
from tracking_receiver.services.lookup_service import LookupService
from tracking_receiver.services.record_store import TrackingRecordStore


@dataclass
class ServiceContainer:
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    credentials: CredentialStore
    records: TrackingRecordStore
    gate: ApiKeyGate
    ingest: IngestService
    lookup: LookupService


def build_container(
    engine: AsyncEngine,
    session_factory: async_sessionmaker[AsyncSession],
    settings: Settings,
) -> ServiceContainer:
    credentials = CredentialStore(session_factory, key_length=settings.api_key_length)
    records = TrackingRecordStore(session_factory)
    gate = ApiKeyGate(
        credentials,
        header_name=settings.api_key_header,
        param_name=settings.api_key_param,
    )
    return ServiceContainer(
        engine=engine,
        session_factory=session_factory,
        credentials=credentials,
        records=records,
        gate=gate,
        ingest=IngestService(gate, records),
        lookup=LookupService(records, page_size=settings.list_page_size),
    )
