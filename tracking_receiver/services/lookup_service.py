"""LookupService — privileged and public read paths over tracking records."""

import structlog

from tracking_receiver.core.exceptions import NotFound
from tracking_receiver.db.models.tracking_record import TrackingRecord
from tracking_receiver.domain.normalize import MAX_ORDER_ID, decode_items
from tracking_receiver.domain.progress import progress_stages, progress_step
from tracking_receiver.schemas.tracking import (
    ProgressStage,
    PublicTrackingRecordOut,
    TrackingProgressOut,
    TrackingRecordOut,
    TrackingRecordPage,
)
from tracking_receiver.services.record_store import TrackingRecordStore

logger = structlog.get_logger(__name__)


def to_record_out(record: TrackingRecord) -> TrackingRecordOut:
    return TrackingRecordOut(
        id=record.id,
        order_id=record.order_id,
        tracking_number=record.tracking_number,
        status=record.status,
        customer_email=record.customer_email,
        order_total=float(record.order_total),
        currency=record.currency,
        date_created=record.date_created,
        order_items=decode_items(record.order_items),
        date_updated=record.date_updated,
    )


def to_public_out(record: TrackingRecord) -> PublicTrackingRecordOut:
    """Redacted view: everything but the customer email."""
    full = to_record_out(record)
    return PublicTrackingRecordOut(**full.model_dump(exclude={"customer_email"}))


class LookupService:
    """Read paths. Authentication for the privileged ones happens at the route."""

    def __init__(self, records: TrackingRecordStore, page_size: int = 20):
        self.records = records
        self.page_size = page_size

    async def get_by_order_id(self, order_id: int) -> TrackingRecordOut:
        # No stored order can sit outside the column range
        if not 0 <= order_id <= MAX_ORDER_ID:
            raise NotFound("Order not found")
        record = await self.records.get_by_order_id(order_id)
        if record is None:
            raise NotFound("Order not found")
        return to_record_out(record)

    async def get_by_tracking_number(self, tracking_number: str) -> PublicTrackingRecordOut:
        record = await self.records.get_by_tracking_number(tracking_number)
        if record is None:
            raise NotFound("Tracking number not found")
        return to_public_out(record)

    async def get_progress(self, tracking_number: str) -> TrackingProgressOut:
        """Progress view for the public tracking display."""
        record = await self.records.get_by_tracking_number(tracking_number)
        if record is None:
            raise NotFound("Tracking number not found")
        return TrackingProgressOut(
            order_id=record.order_id,
            tracking_number=record.tracking_number,
            status=record.status,
            order_date=record.date_created,
            step=progress_step(record.status),
            stages=[ProgressStage(**stage) for stage in progress_stages(record.status)],
            order_items=decode_items(record.order_items),
        )

    async def list_records(
        self,
        *,
        search: str | None = None,
        order_id: int | None = None,
        tracking_number: str | None = None,
        customer_email: str | None = None,
        page: int = 1,
        per_page: int | None = None,
    ) -> TrackingRecordPage:
        result = await self.records.list_records(
            search=search,
            order_id=order_id,
            tracking_number=tracking_number,
            customer_email=customer_email,
            page=page,
            per_page=per_page or self.page_size,
        )
        logger.debug("tracking_records_listed", total=result.total, page=result.page)
        return TrackingRecordPage(
            items=[to_record_out(r) for r in result.records],
            total=result.total,
            page=result.page,
            per_page=result.per_page,
            total_pages=result.total_pages,
        )
