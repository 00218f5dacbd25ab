"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of RPREPORT, licensed under the MIT License.
See LICENSE file for details.
"""

"""
Timestamp helpers for the ReportPortal wire format.

The service expects integer epoch milliseconds rather than ISO-8601 strings.
"""

from datetime import datetime, timedelta, timezone

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MILLISECOND = timedelta(milliseconds=1)


def utc_now() -> datetime:
    """Return the current wall-clock time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_timestamp(moment: datetime) -> int:
    """
    Convert a datetime to epoch milliseconds.

    Naive datetimes are interpreted as local time, the same way
    ``datetime.timestamp()`` treats them. Sub-millisecond precision is truncated.

    Args:
        moment: The datetime to convert

    Returns:
        Milliseconds since the Unix epoch

    """
    if moment.tzinfo is None:
        moment = moment.astimezone()
    return (moment - EPOCH) // _ONE_MILLISECOND


def now_timestamp() -> int:
    """Return the current time in epoch milliseconds."""
    return to_timestamp(utc_now())
