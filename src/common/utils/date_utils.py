"""Utility functions for date manipulation."""

from datetime import datetime

import pytz


def utc_now() -> datetime:
    """Returns the current time as a timezone-aware UTC datetime."""
    return datetime.now(pytz.utc)


def format_datetime_for_webhook(dt: datetime | None) -> str | None:
    """Formats a datetime as an ISO 8601 string with a trailing Z for UTC."""
    if not dt:
        return None
    if dt.tzinfo is None:
        dt = pytz.utc.localize(dt)
    return dt.astimezone(pytz.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"
