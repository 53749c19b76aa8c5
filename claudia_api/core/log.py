"""Logging setup shared by the app factory and scripts."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured = False


def configure_logging(level: str = "INFO") -> None:
    """Install the root handler once; later calls only adjust the level."""
    global _configured
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.INFO
    if not _configured:
        logging.basicConfig(level=numeric, format=LOG_FORMAT)
        _configured = True
    logging.getLogger("claudia_api").setLevel(numeric)
