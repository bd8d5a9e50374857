"""AppOption model — named scalar settings such as the webhook API key."""

from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, String, Text

from tracking_receiver.db.base import Base


class AppOption(Base):
    __tablename__ = "app_options"

    name = Column(String(191), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(
        DateTime,
        nullable=False,
        default=lambda: datetime.now(UTC).replace(tzinfo=None),
    )
