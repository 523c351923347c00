"""Logging setup for the application."""

import logging

from config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_configured = False


def setup_logging(level: str = LOG_LEVEL) -> None:
    """Configure the root logger once.

    Args:
        level: Logging level name, e.g. "INFO" or "DEBUG".
    """
    global _configured
    if _configured:
        return

    logging.basicConfig(level=level, format=LOG_FORMAT)
    # SQLAlchemy echoes every statement at INFO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    _configured = True
