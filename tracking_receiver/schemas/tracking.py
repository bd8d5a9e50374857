"""Pydantic schemas for tracking records, webhook acknowledgements and listings."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class PublicTrackingRecordOut(BaseModel):
    """Tracking record as exposed on the public tracking endpoint (no customer email)."""

    id: int
    order_id: int
    tracking_number: str
    status: str
    order_total: float
    currency: str
    date_created: datetime
    order_items: list[Any] = Field(default_factory=list)
    date_updated: datetime


class TrackingRecordOut(PublicTrackingRecordOut):
    """Full tracking record for authenticated callers."""

    customer_email: str


class IngestResponse(BaseModel):
    success: bool = True
    message: str = "Order tracking data saved successfully"
    order_id: int


class IngestResult(BaseModel):
    """Outcome of a successful webhook ingest."""

    order_id: int


class ProgressStage(BaseModel):
    step: int
    label: str
    active: bool


class TrackingProgressOut(BaseModel):
    """Data behind the public tracking display."""

    order_id: int
    tracking_number: str
    status: str
    order_date: datetime
    step: int
    stages: list[ProgressStage]
    order_items: list[Any] = Field(default_factory=list)


class TrackingRecordPage(BaseModel):
    """Paginated listing for the admin table.

    items defaults to empty array, never null.
    """

    items: list[TrackingRecordOut] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    per_page: int
    total_pages: int = 0
