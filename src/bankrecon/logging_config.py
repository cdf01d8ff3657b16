"""Logging setup shared by the CLI and library modules."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Return a module logger under the bankrecon namespace."""
    return logging.getLogger(name)


def configure_logging(level: str | int = logging.WARNING) -> None:
    """Configure root logging once for command-line use.

    Args:
        level: Level name (e.g. "INFO") or numeric logging level
    """
    if isinstance(level, str):
        numeric = logging.getLevelName(level.strip().upper())
        if not isinstance(numeric, int):
            raise ValueError(f"Unknown log level '{level}'")
        level = numeric

    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("bankrecon").setLevel(level)
