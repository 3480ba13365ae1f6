"""Timestamp helpers shared by the validator and the engine."""

from __future__ import annotations

import contextlib
from datetime import UTC, date, datetime
from email.utils import parsedate_to_datetime

# Hand-written forms accepted besides ISO-8601.
_EXTRA_FORMATS = (
    "%Y/%m/%d",
    "%Y/%m/%d %H:%M",
    "%Y/%m/%d %H:%M:%S",
    "%m/%d/%Y",
    "%m/%d/%Y %H:%M:%S",
    "%b %d %Y",
    "%B %d %Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%d %b %Y",
    "%d %B %Y",
)


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with milliseconds and a Z suffix."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: object) -> datetime | None:
    """Parse ISO-8601, RFC 2822 or a common slash/month-name date; None if not a date."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    with contextlib.suppress(ValueError):
        return datetime.fromisoformat(text)
    for fmt in _EXTRA_FORMATS:
        with contextlib.suppress(ValueError):
            return datetime.strptime(text, fmt)
    try:
        return parsedate_to_datetime(text)
    except (TypeError, ValueError, IndexError):
        return None


def is_valid_date(value: object) -> bool:
    """Return True if value is a date or a string parse_timestamp accepts."""
    return parse_timestamp(value) is not None


def date_prefix(value: object) -> str:
    """YYYY-MM-DD for a valid timestamp, else today's UTC date."""
    parsed = parse_timestamp(value)
    if parsed is None:
        return datetime.now(UTC).date().isoformat()
    return parsed.date().isoformat()
