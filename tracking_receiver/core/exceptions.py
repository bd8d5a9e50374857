from typing import Any


class TrackingReceiverError(Exception):
    """Base exception for the tracking receiver.

    Carries the HTTP status and machine-readable code used when rendering the
    error body. ``extra`` is merged into the response payload.
    """

    status_code: int = 500
    code: str = "internal_error"
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None, **extra: Any):
        self.message = message or self.default_message
        self.extra = extra
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, **self.extra}


class Unauthorized(TrackingReceiverError):
    """Raised when the API key is missing, wrong, or not configured."""

    status_code = 401
    code = "unauthorized"
    default_message = "Invalid or missing API key"


class BadRequest(TrackingReceiverError):
    """Raised when a webhook payload lacks required fields."""

    status_code = 400
    code = "missing_data"
    default_message = "Order ID and tracking number are required"

    def __init__(self, fields: list[str]):
        self.fields = fields
        super().__init__(f"Missing required field(s): {', '.join(fields)}", fields=fields)


class NotFound(TrackingReceiverError):
    """Raised when no tracking record matches a lookup."""

    status_code = 404
    code = "not_found"
    default_message = "Record not found"


class StorageError(TrackingReceiverError):
    """Raised when the underlying database operation fails."""

    status_code = 500
    code = "database_error"
    default_message = "Failed to save order tracking data"
