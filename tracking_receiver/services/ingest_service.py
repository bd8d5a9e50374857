"""IngestService — authenticates, validates, normalizes and stores webhook payloads."""

from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

import structlog

from tracking_receiver.core.auth import ApiKeyGate
from tracking_receiver.core.exceptions import BadRequest
from tracking_receiver.domain.normalize import (
    coerce_order_id,
    coerce_total,
    encode_items,
    is_blank,
    parse_timestamp,
    sanitize_email,
    sanitize_text,
)
from tracking_receiver.schemas.tracking import IngestResult
from tracking_receiver.services.record_store import NormalizedOrder, TrackingRecordStore

logger = structlog.get_logger(__name__)

REQUIRED_FIELDS = ("order_id", "tracking_number")
DEFAULT_STATUS = "pending"
DEFAULT_CURRENCY = "USD"


def utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


def normalize_payload(body: Mapping[str, Any], now: datetime) -> NormalizedOrder:
    """Coerce a validated webhook body into a storable order.

    Optional fields fall back to their defaults; required fields must already
    have been checked by the caller.
    """
    status = sanitize_text(body.get("status"), max_length=100) if "status" in body else ""
    currency = sanitize_text(body.get("currency"), max_length=10) if "currency" in body else ""

    return NormalizedOrder(
        order_id=coerce_order_id(body["order_id"]),
        tracking_number=sanitize_text(body["tracking_number"], max_length=255),
        status=status or DEFAULT_STATUS,
        customer_email=sanitize_email(body.get("customer_email")),
        order_total=coerce_total(body.get("order_total")),
        currency=currency or DEFAULT_CURRENCY,
        order_items=encode_items(body.get("items")),
        date_created=parse_timestamp(body.get("date_created"), now),
    )


class IngestService:
    """Webhook entry point: auth check, validation, normalization, upsert."""

    def __init__(
        self,
        gate: ApiKeyGate,
        records: TrackingRecordStore,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.gate = gate
        self.records = records
        self.clock = clock

    async def ingest(
        self,
        headers: Mapping[str, str],
        query_params: Mapping[str, Any],
        body: Any,
    ) -> IngestResult:
        """Store one webhook event.

        Args:
            headers: Request headers (API key header)
            query_params: Query string (``api_key`` parameter)
            body: Decoded JSON body; anything but an object counts as empty

        Returns:
            IngestResult with the normalized order_id

        Raises:
            Unauthorized: API key missing or wrong
            BadRequest: order_id or tracking_number missing
            StorageError: the upsert failed
        """
        if not isinstance(body, Mapping):
            body = {}

        # Body parameters count as request parameters; the query string wins on clashes
        params = {**body, **query_params}
        await self.gate.authenticate(headers, params)

        missing = [field for field in REQUIRED_FIELDS if is_blank(body.get(field))]
        if missing:
            logger.info("tracking_ingest_rejected", reason="missing_data", fields=missing)
            raise BadRequest(missing)

        now = self.clock()
        order = normalize_payload(body, now)
        await self.records.upsert(order, now)

        logger.info(
            "tracking_ingested",
            order_id=order.order_id,
            tracking_number=order.tracking_number,
            status=order.status,
        )
        return IngestResult(order_id=order.order_id)
