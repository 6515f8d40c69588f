"""
Date and time helpers.

Timestamps are stored as ISO-8601 strings in UTC (``...Z`` suffix) and
purchase dates as plain ``YYYY-MM-DD`` strings, matching what the hosted
backend returns.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

ISO_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone info.

    Prefer this over ``datetime.utcnow()`` (which returns naive datetimes).
    """
    return datetime.now(tz=timezone.utc)


def today() -> date:
    """Return today's date in UTC."""
    return utcnow().date()


def to_iso(value: datetime) -> str:
    """Format an aware (or naive-as-UTC) datetime as ``YYYY-MM-DDTHH:MM:SSZ``."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime(ISO_FORMAT)
