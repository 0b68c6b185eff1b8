"""Shared utilities: datetime and mapping merge."""

from shopbridge.shared.utils.datetime import parse_iso_ms, to_timestamp_ms
from shopbridge.shared.utils.merge import deep_merge

__all__ = [
    "deep_merge",
    "to_timestamp_ms",
    "parse_iso_ms",
]
