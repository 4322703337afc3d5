"""Logging for the POS front end.

Modules log through ``get_logger("pos_ui.<module>")``. Until ``app.py`` calls
``configure_logging`` the ``pos_ui`` logger only has a ``NullHandler``, so
tests and imports stay quiet.
"""

import logging

from config import LOG_LEVEL

LOGGER_NAME = "pos_ui"
LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def configure_logging():
    """Send ``pos_ui`` records to stderr at ``POS_LOG_LEVEL`` (default INFO).

    Streamlit re-runs the script on every interaction; only the first call
    adds a handler.
    """
    logger = logging.getLogger(LOGGER_NAME)
    if any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        return

    level = logging.getLevelName((LOG_LEVEL or "INFO").strip().upper())
    if not isinstance(level, int):
        level = logging.INFO

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False


def get_logger(name):
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)
