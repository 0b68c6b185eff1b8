"""Shared utilities: enums, logging, and cross-cutting helpers.

Used by domain and infrastructure. No business logic.
"""

from shopbridge.shared.enums import ApiType, ErrorKind, FileStatus, SignatureSource
from shopbridge.shared.logging import get_logger, setup_logging
from shopbridge.shared.utils import deep_merge, parse_iso_ms, to_timestamp_ms

__all__ = [
    "ApiType",
    "ErrorKind",
    "FileStatus",
    "SignatureSource",
    "setup_logging",
    "get_logger",
    "deep_merge",
    "to_timestamp_ms",
    "parse_iso_ms",
]
