"""Permissive coercion of webhook fields.

Webhook senders are loosely typed: numbers arrive as strings, emails may be
malformed, dates come in several layouts. Every helper here returns a usable
value instead of raising, so a payload is never rejected for its shape once
the required fields are present.
"""

import json
import math
import re
from datetime import UTC, datetime
from typing import Any

from pydantic import EmailStr, TypeAdapter, ValidationError

_LEADING_INT = re.compile(r"^\s*[+-]?\d+")
_LEADING_FLOAT = re.compile(r"^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_TAGS = re.compile(r"<[^>]*>?")
_URL_OCTETS = re.compile(r"%[a-fA-F0-9]{2}")
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]+")
_WHITESPACE = re.compile(r"\s+")

_email_adapter = TypeAdapter(EmailStr)

# Upper bound of the BIGINT order_id column
MAX_ORDER_ID = 2**63 - 1


def is_blank(value: Any) -> bool:
    """True for values a required field may not take.

    None, blank strings, empty containers, zero (0, 0.0, False) and the
    string "0" all count as absent.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() in ("", "0")
    if isinstance(value, (bool, int, float)):
        return value == 0
    if isinstance(value, (list, dict)):
        return not value
    return False


def _parse_leading_int(text: str) -> int:
    text = text.strip()
    # More than 19 significant digits cannot fit a BIGINT
    if len(text.lstrip("+-").lstrip("0")) > 19:
        return -1 if text.startswith("-") else MAX_ORDER_ID
    return int(text)


def coerce_order_id(value: Any) -> int:
    """Coerce to an integer in the order_id column range.

    Unparsable or negative input gives 0; values past the BIGINT range
    saturate at MAX_ORDER_ID.
    """
    if isinstance(value, bool):
        number = int(value)
    elif isinstance(value, int):
        number = value
    elif isinstance(value, float):
        number = int(value) if math.isfinite(value) else 0
    elif isinstance(value, str):
        match = _LEADING_INT.match(value)
        number = _parse_leading_int(match.group()) if match else 0
    else:
        number = 0
    return min(max(number, 0), MAX_ORDER_ID)


def coerce_total(value: Any) -> float:
    """Coerce to a float rounded to 2 places; unparsable or non-finite input gives 0."""
    if value is None:
        return 0.0
    if isinstance(value, bool):
        number = float(value)
    elif isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        match = _LEADING_FLOAT.match(value)
        number = float(match.group()) if match else 0.0
    else:
        number = 0.0
    if not math.isfinite(number):
        return 0.0
    return round(number, 2)


def sanitize_text(value: Any, max_length: int | None = None) -> str:
    """Reduce a value to a single line of plain text.

    Strips tags, percent-encoded octets and control characters, collapses
    whitespace and trims. Non-scalar values become "".
    """
    if isinstance(value, bool):
        text = "1" if value else ""
    elif isinstance(value, (str, int, float)):
        text = str(value)
    else:
        return ""

    text = _TAGS.sub("", text)
    text = _URL_OCTETS.sub("", text)
    text = _CONTROL_CHARS.sub(" ", text)
    text = _WHITESPACE.sub(" ", text).strip()
    if max_length is not None:
        text = text[:max_length].rstrip()
    return text


def sanitize_email(value: Any) -> str:
    """Return the normalized address, or "" when the value is not a valid email."""
    if not isinstance(value, str) or not value.strip():
        return ""
    try:
        return str(_email_adapter.validate_python(value.strip()))
    except ValidationError:
        return ""


def parse_timestamp(value: Any, now: datetime) -> datetime:
    """Parse a caller-supplied creation time as naive UTC.

    Accepts ISO-8601 and "YYYY-MM-DD HH:MM:SS". Missing or unparsable values
    fall back to ``now``; times after ``now`` are clamped to it so a record is
    never created after it was last updated.
    """
    if not isinstance(value, str) or not value.strip():
        return now
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return now
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(UTC).replace(tzinfo=None)
    return min(parsed, now)


def encode_items(value: Any) -> str:
    """JSON-encode the items list as given; anything but a list is stored as []."""
    if not isinstance(value, list):
        return "[]"
    return json.dumps(value, ensure_ascii=False)


def decode_items(blob: str | None) -> list:
    """Decode a stored items blob, yielding [] for anything that is not a JSON list."""
    if not blob:
        return []
    try:
        items = json.loads(blob)
    except (TypeError, ValueError):
        return []
    return items if isinstance(items, list) else []
