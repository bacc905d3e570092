"""
Logging setup.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Configure the root logger once for the whole process.

    Args:
        level: Level name, e.g. "INFO" or "DEBUG"
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())

    # Uvicorn reload re-imports the app; don't stack handlers
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(handler)

    # Quiet chatty libraries
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)
