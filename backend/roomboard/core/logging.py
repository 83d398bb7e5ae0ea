"""
Logging setup for the Roomboard backend.
"""

import logging
from typing import Optional

from .config import settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging once, using LOG_LEVEL unless overridden."""
    level_name = (level or settings.LOG_LEVEL).upper()
    logging.basicConfig(level=level_name, format=LOG_FORMAT)
    logging.getLogger("roomboard").setLevel(level_name)

    # Socket.IO and engine.io are chatty at INFO
    logging.getLogger("socketio").setLevel(logging.WARNING)
    logging.getLogger("engineio").setLevel(logging.WARNING)
