"""Logging configuration for embedding applications and tests."""

import logging
import sys

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(log_level: str = "INFO") -> None:
    """Configure application logging.

    Library modules only create loggers via ``logging.getLogger(__name__)``;
    callers that want console output call this once at startup.
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format=DEFAULT_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout)
        ],
        force=True,
    )
    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
