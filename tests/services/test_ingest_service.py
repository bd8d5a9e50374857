"""Tests for IngestService — auth, validation, normalization and upsert semantics."""

from datetime import datetime

import pytest
from sqlalchemy import func, select

from tracking_receiver.core.exceptions import BadRequest, StorageError, Unauthorized
from tracking_receiver.db.models.tracking_record import TrackingRecord
from tracking_receiver.domain.normalize import MAX_ORDER_ID
from tracking_receiver.services.record_store import TrackingRecordStore

pytestmark = pytest.mark.unit


async def count_records(session_factory, order_id: int | None = None) -> int:
    stmt = select(func.count()).select_from(TrackingRecord)
    if order_id is not None:
        stmt = stmt.where(TrackingRecord.order_id == order_id)
    async with session_factory() as session:
        return await session.scalar(stmt)


# ---------------------------------------------------------------------------
# Authentication and validation
# ---------------------------------------------------------------------------


async def test_rejects_without_configured_key(ingest_service, session_factory):
    with pytest.raises(Unauthorized):
        await ingest_service.ingest({}, {}, {"order_id": 1, "tracking_number": "TRK1"})
    assert await count_records(session_factory) == 0


async def test_accepts_api_key_in_body(ingest_service, api_key):
    body = {"order_id": 5, "tracking_number": "TRK5", "api_key": api_key}
    result = await ingest_service.ingest({}, {}, body)
    assert result.order_id == 5


async def test_accepts_api_key_in_query(ingest_service, api_key):
    result = await ingest_service.ingest({}, {"api_key": api_key}, {"order_id": 6, "tracking_number": "TRK6"})
    assert result.order_id == 6


async def test_missing_tracking_number_names_field(ingest_service, auth_headers, session_factory):
    with pytest.raises(BadRequest) as exc_info:
        await ingest_service.ingest(auth_headers, {}, {"order_id": 100})
    assert exc_info.value.fields == ["tracking_number"]
    assert "tracking_number" in exc_info.value.message
    assert await count_records(session_factory) == 0


async def test_missing_both_fields_named(ingest_service, auth_headers):
    with pytest.raises(BadRequest) as exc_info:
        await ingest_service.ingest(auth_headers, {}, {"status": "shipped"})
    assert exc_info.value.fields == ["order_id", "tracking_number"]


async def test_blank_tracking_number_is_missing(ingest_service, auth_headers):
    with pytest.raises(BadRequest):
        await ingest_service.ingest(auth_headers, {}, {"order_id": 1, "tracking_number": "  "})


@pytest.mark.parametrize("order_id", [0, "0", 0.0, False])
async def test_zero_order_id_is_missing(ingest_service, auth_headers, session_factory, order_id):
    with pytest.raises(BadRequest) as exc_info:
        await ingest_service.ingest(auth_headers, {}, {"order_id": order_id, "tracking_number": "Z0"})
    assert exc_info.value.fields == ["order_id"]
    assert await count_records(session_factory) == 0


async def test_zero_tracking_number_is_missing(ingest_service, auth_headers, session_factory):
    with pytest.raises(BadRequest) as exc_info:
        await ingest_service.ingest(auth_headers, {}, {"order_id": 5, "tracking_number": "0"})
    assert exc_info.value.fields == ["tracking_number"]
    assert await count_records(session_factory) == 0


async def test_non_object_body_is_missing_everything(ingest_service, auth_headers):
    with pytest.raises(BadRequest) as exc_info:
        await ingest_service.ingest(auth_headers, {}, ["order_id", 1])
    assert exc_info.value.fields == ["order_id", "tracking_number"]


async def test_auth_checked_before_validation(ingest_service, api_key):
    with pytest.raises(Unauthorized):
        await ingest_service.ingest({"X-API-Key": "wrong"}, {}, {})


# ---------------------------------------------------------------------------
# Insert and normalization
# ---------------------------------------------------------------------------


async def test_fresh_order_round_trips(ingest_service, lookup_service, auth_headers):
    body = {
        "order_id": 100,
        "tracking_number": "TRK1",
        "status": "shipped",
        "customer_email": "buyer@gmail.com",
        "order_total": 49.99,
        "currency": "EUR",
        "items": [{"name": "Mug", "quantity": 2}],
    }
    result = await ingest_service.ingest(auth_headers, {}, body)
    assert result.order_id == 100

    record = await lookup_service.get_by_order_id(100)
    assert record.tracking_number == "TRK1"
    assert record.status == "shipped"
    assert record.customer_email == "buyer@gmail.com"
    assert record.order_total == 49.99
    assert record.currency == "EUR"
    assert record.order_items == [{"name": "Mug", "quantity": 2}]
    assert record.date_created == record.date_updated


async def test_defaults_applied(ingest_service, lookup_service, auth_headers, clock):
    first_tick = clock.current
    await ingest_service.ingest(auth_headers, {}, {"order_id": 7, "tracking_number": "TRK7"})

    record = await lookup_service.get_by_order_id(7)
    assert record.status == "pending"
    assert record.currency == "USD"
    assert record.customer_email == ""
    assert record.order_total == 0
    assert record.order_items == []
    assert record.date_created == first_tick


async def test_loose_values_coerced(ingest_service, lookup_service, auth_headers):
    body = {
        "order_id": "42abc",
        "tracking_number": " <i>TRK42</i>\n",
        "customer_email": "not an email",
        "order_total": "19.5",
    }
    result = await ingest_service.ingest(auth_headers, {}, body)
    assert result.order_id == 42

    record = await lookup_service.get_by_order_id(42)
    assert record.tracking_number == "TRK42"
    assert record.customer_email == ""
    assert record.order_total == 19.5


async def test_non_numeric_order_id_stored_as_zero(ingest_service, lookup_service, auth_headers):
    result = await ingest_service.ingest(auth_headers, {}, {"order_id": "abc", "tracking_number": "TRK0"})
    assert result.order_id == 0
    assert (await lookup_service.get_by_order_id(0)).tracking_number == "TRK0"


async def test_order_id_beyond_bigint_saturates(ingest_service, lookup_service, auth_headers):
    result = await ingest_service.ingest(auth_headers, {}, {"order_id": 10**20, "tracking_number": "TRK-BIG"})
    assert result.order_id == MAX_ORDER_ID
    assert (await lookup_service.get_by_order_id(MAX_ORDER_ID)).tracking_number == "TRK-BIG"


async def test_caller_supplied_date_created(ingest_service, lookup_service, auth_headers):
    body = {"order_id": 8, "tracking_number": "TRK8", "date_created": "2025-12-24 09:15:00"}
    await ingest_service.ingest(auth_headers, {}, body)

    record = await lookup_service.get_by_order_id(8)
    assert record.date_created == datetime(2025, 12, 24, 9, 15, 0)
    assert record.date_updated >= record.date_created


# ---------------------------------------------------------------------------
# Update semantics
# ---------------------------------------------------------------------------


async def test_update_keeps_date_created_and_advances_date_updated(
    ingest_service, lookup_service, auth_headers
):
    await ingest_service.ingest(
        auth_headers, {}, {"order_id": 200, "tracking_number": "TRK200", "status": "pending"}
    )
    before = await lookup_service.get_by_order_id(200)

    await ingest_service.ingest(
        auth_headers,
        {},
        {
            "order_id": 200,
            "tracking_number": "TRK200-B",
            "status": "shipped",
            "customer_email": "late@gmail.com",
            "order_total": "10.00",
            "currency": "GBP",
            "items": [{"name": "Tee", "quantity": 1}],
            "date_created": "2020-01-01 00:00:00",
        },
    )
    after = await lookup_service.get_by_order_id(200)

    assert after.id == before.id
    assert after.date_created == before.date_created
    assert after.date_updated > before.date_updated
    assert after.tracking_number == "TRK200-B"
    assert after.status == "shipped"
    assert after.customer_email == "late@gmail.com"
    assert after.order_total == 10.0
    assert after.currency == "GBP"
    assert after.order_items == [{"name": "Tee", "quantity": 1}]


async def test_identical_payload_twice_yields_one_record(ingest_service, auth_headers, session_factory):
    body = {"order_id": 300, "tracking_number": "TRK300", "status": "processing"}
    await ingest_service.ingest(auth_headers, {}, body)
    await ingest_service.ingest(auth_headers, {}, body)
    assert await count_records(session_factory, order_id=300) == 1
    assert await count_records(session_factory) == 1


async def test_unknown_status_stored_as_is(ingest_service, lookup_service, auth_headers):
    await ingest_service.ingest(auth_headers, {}, {"order_id": 9, "tracking_number": "TRK9", "status": "lost"})
    assert (await lookup_service.get_by_order_id(9)).status == "lost"


# ---------------------------------------------------------------------------
# Storage failures
# ---------------------------------------------------------------------------


class _FailingRecordStore(TrackingRecordStore):
    async def upsert(self, order, now):
        raise StorageError()


async def test_storage_failure_surfaces_storage_error(gate, api_key, session_factory, clock):
    from tracking_receiver.services.ingest_service import IngestService

    service = IngestService(gate, _FailingRecordStore(session_factory), clock=clock)
    with pytest.raises(StorageError) as exc_info:
        await service.ingest({"X-API-Key": api_key}, {}, {"order_id": 1, "tracking_number": "TRK1"})
    assert exc_info.value.status_code == 500
    assert exc_info.value.code == "database_error"


async def test_failed_upsert_leaves_prior_record(records, session_factory, ingest_service, auth_headers, lookup_service):
    """A write rejected by the database rolls back; the stored row is unchanged."""
    from dataclasses import replace

    from tracking_receiver.services.ingest_service import normalize_payload

    await ingest_service.ingest(auth_headers, {}, {"order_id": 400, "tracking_number": "TRK400"})
    before = await lookup_service.get_by_order_id(400)

    now = datetime(2026, 6, 1)
    bad = replace(
        normalize_payload({"order_id": 400, "tracking_number": "TRK400-NEW"}, now),
        tracking_number=None,  # violates NOT NULL
    )
    with pytest.raises(StorageError):
        await records.upsert(bad, now)

    after = await lookup_service.get_by_order_id(400)
    assert after == before
