"""Logging configuration for shopbridge."""

import logging
import sys

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def setup_logging(level: str = "error") -> None:
    """Configure package-wide logging.

    The level is passed in explicitly (usually Settings.log_level);
    unknown names fall back to ERROR. Output goes to stdout.

    Args:
        level: One of "debug", "info", "warning", "error".
    """
    logging.basicConfig(
        level=_LEVELS.get(level.lower(), logging.ERROR),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def get_logger(name: str) -> logging.Logger:
    """Return a logger for the given module name.

    Args:
        name: Usually __name__ of the calling module.

    Returns:
        Logger instance.
    """
    return logging.getLogger(name)
