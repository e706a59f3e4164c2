"""
Logging setup.

Modules log through ``logging.getLogger(__name__)``; entry points call
``configure_logging`` once.
"""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str | int = "INFO") -> None:
    """Attach a console handler to the ``artiflare`` logger (idempotent)."""
    logger = logging.getLogger("artiflare")
    logger.setLevel(level)

    if any(getattr(h, "_artiflare", False) for h in logger.handlers):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    handler._artiflare = True  # type: ignore[attr-defined]
    logger.addHandler(handler)


__all__ = ("configure_logging", "LOG_FORMAT", "DATE_FORMAT")
