"""
UTC datetime utilities.

Storage metadata carries modification times as epoch milliseconds;
these helpers convert timezone-aware datetimes and ISO-8601 strings to it.
"""

from datetime import UTC, datetime


def to_timestamp_ms(dt: datetime | None) -> int | None:
    """
    Convert a datetime to epoch milliseconds.

    Naive datetimes are assumed to be UTC. None passes through.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return int(dt.timestamp() * 1000)


def parse_iso_ms(value: str | None) -> int | None:
    """Parse an ISO-8601 timestamp (e.g. '2024-05-01T10:00:00Z') to epoch millis."""
    if not value:
        return None
    return to_timestamp_ms(datetime.fromisoformat(value.replace("Z", "+00:00")))
