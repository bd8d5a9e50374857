"""Re-export all models so Base.metadata sees them."""

from tracking_receiver.db.models.app_option import AppOption
from tracking_receiver.db.models.tracking_record import TrackingRecord

__all__ = [
    "AppOption",
    "TrackingRecord",
]
