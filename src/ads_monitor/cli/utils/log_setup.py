"""Logging configuration for CLI commands."""

import logging
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

_handler: Optional[logging.Handler] = None


def setup_logging(debug: bool = False) -> logging.Logger:
    """Send package logs to stderr. Calling again replaces the previous handler."""
    global _handler

    package_logger = logging.getLogger("ads_monitor")
    if _handler is not None:
        package_logger.removeHandler(_handler)

    _handler = logging.StreamHandler()
    _handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(_handler)
    package_logger.setLevel(logging.DEBUG if debug else logging.INFO)

    return package_logger
