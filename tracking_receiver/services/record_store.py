"""TrackingRecordStore — persistence for tracking records.

Writes go through one atomic upsert keyed on the unique order_id column;
reads cover lookup by order, lookup by tracking number and the paginated
listing used by the admin table.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import structlog
from sqlalchemy import desc, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tracking_receiver.core.exceptions import StorageError
from tracking_receiver.db.models.tracking_record import TrackingRecord
from tracking_receiver.db.upsert import build_upsert
from tracking_receiver.domain.normalize import MAX_ORDER_ID

logger = structlog.get_logger(__name__)

# Everything except id, order_id and date_created
MUTABLE_COLUMNS = (
    "tracking_number",
    "status",
    "customer_email",
    "order_total",
    "currency",
    "order_items",
    "date_updated",
)

MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class NormalizedOrder:
    """A webhook payload after coercion, ready to be written."""

    order_id: int
    tracking_number: str
    status: str
    customer_email: str
    order_total: float
    currency: str
    order_items: str
    date_created: datetime

    def to_row(self, now: datetime) -> dict[str, Any]:
        return {
            "order_id": self.order_id,
            "tracking_number": self.tracking_number,
            "status": self.status,
            "customer_email": self.customer_email,
            "order_total": self.order_total,
            "currency": self.currency,
            "order_items": self.order_items,
            "date_created": self.date_created,
            "date_updated": now,
        }


@dataclass(frozen=True)
class RecordPage:
    records: list[TrackingRecord]
    total: int
    page: int
    per_page: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.per_page) if self.per_page else 0


class TrackingRecordStore:
    """Data access for the order_tracking table.

    Uses dependency injection (takes session_factory) so tests can bind it to
    a throwaway database.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def upsert(self, order: NormalizedOrder, now: datetime) -> None:
        """Insert the order, or overwrite the mutable fields of the existing row.

        A single INSERT ... ON CONFLICT statement under the unique order_id
        constraint. On failure the transaction is rolled back and the prior
        row is left as it was.

        Raises:
            StorageError: the database rejected the write
        """
        async with self.session_factory() as session:
            try:
                stmt = build_upsert(
                    session.bind.dialect.name,
                    TrackingRecord,
                    order.to_row(now),
                    conflict_columns=["order_id"],
                    update_columns=MUTABLE_COLUMNS,
                )
                await session.execute(stmt)
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(
                    "tracking_storage_failed",
                    order_id=order.order_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise StorageError() from e

    async def get_by_order_id(self, order_id: int) -> TrackingRecord | None:
        async with self.session_factory() as session:
            result = await session.execute(select(TrackingRecord).where(TrackingRecord.order_id == order_id))
            return result.scalar_one_or_none()

    async def get_by_tracking_number(self, tracking_number: str) -> TrackingRecord | None:
        """Exact match on tracking number; the most recently updated record wins."""
        async with self.session_factory() as session:
            result = await session.execute(
                select(TrackingRecord)
                .where(TrackingRecord.tracking_number == tracking_number)
                .order_by(desc(TrackingRecord.date_updated), desc(TrackingRecord.id))
                .limit(1)
            )
            return result.scalar_one_or_none()

    async def list_records(
        self,
        *,
        search: str | None = None,
        order_id: int | None = None,
        tracking_number: str | None = None,
        customer_email: str | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> RecordPage:
        """Paginated listing, newest update first.

        ``search`` matches order_id exactly (when numeric) OR a substring of
        tracking_number OR a substring of customer_email. The individual
        filters are ANDed with it and with each other.
        """
        page = max(page, 1)
        per_page = min(max(per_page, 1), MAX_PAGE_SIZE)

        conditions = []
        if search:
            alternatives = [
                TrackingRecord.tracking_number.contains(search, autoescape=True),
                TrackingRecord.customer_email.contains(search, autoescape=True),
            ]
            term = search.strip()
            if term.isdecimal() and len(term) <= 19 and int(term) <= MAX_ORDER_ID:
                alternatives.append(TrackingRecord.order_id == int(term))
            conditions.append(or_(*alternatives))
        if order_id is not None:
            conditions.append(TrackingRecord.order_id == order_id)
        if tracking_number:
            conditions.append(TrackingRecord.tracking_number.contains(tracking_number, autoescape=True))
        if customer_email:
            conditions.append(TrackingRecord.customer_email.contains(customer_email, autoescape=True))

        async with self.session_factory() as session:
            total = await session.scalar(select(func.count()).select_from(TrackingRecord).where(*conditions))
            result = await session.execute(
                select(TrackingRecord)
                .where(*conditions)
                .order_by(desc(TrackingRecord.date_updated), desc(TrackingRecord.id))
                .offset((page - 1) * per_page)
                .limit(per_page)
            )
            records = list(result.scalars().all())

        return RecordPage(records=records, total=total or 0, page=page, per_page=per_page)
