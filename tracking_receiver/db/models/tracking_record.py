"""TrackingRecord model — one row per order, upserted by webhook."""

from sqlalchemy import BigInteger, Column, DateTime, Integer, Numeric, String, Text

from tracking_receiver.db.base import Base


class TrackingRecord(Base):
    __tablename__ = "order_tracking"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(BigInteger, unique=True, nullable=False)

    tracking_number = Column(String(255), nullable=False, index=True)
    status = Column(String(100), nullable=False, default="pending")
    customer_email = Column(String(255), nullable=False, default="", index=True)
    order_total = Column(Numeric(10, 2, asdecimal=False), nullable=False, default=0)
    currency = Column(String(10), nullable=False, default="USD")

    # JSON-encoded list of {"name", "quantity"}; decoded by the lookup layer
    order_items = Column(Text, nullable=False, default="[]")

    # Naive UTC. date_created is never part of an update.
    date_created = Column(DateTime, nullable=False)
    date_updated = Column(DateTime, nullable=False)
