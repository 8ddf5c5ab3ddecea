"""
Logging setup shared by the API process and maintenance scripts.

Console only; deployments collect stdout.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Loggers that produce a line per query or request
NOISY_LOGGERS = [
    "sqlalchemy.engine",
    "uvicorn.access",
]


def setup_logging(level: str = "INFO") -> logging.Logger:
    """
    Configure the root logger with a single console handler.

    Calling it again replaces the handler instead of stacking a
    second one, so the app factory and tests can both call it.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in list(root_logger.handlers):
        if getattr(handler, "_church_ledger", False):
            root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
    handler._church_ledger = True
    root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root_logger
