"""Logging configuration for LivePDF Viewer."""

import logging

from .config import log_level_from_env

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

_handler = None


def setup_logging(log_level=None):
    """Install a single stream handler on the package logger.

    Calling it again only updates the level.

    Args:
        log_level: Level name such as "DEBUG". Defaults to the
                   LIVEPDF_LOG_LEVEL environment variable.

    Returns:
        The configured package logger.
    """
    global _handler

    level_name = (log_level or log_level_from_env()).upper()
    logger = logging.getLogger("livepdf_viewer")
    logger.setLevel(getattr(logging, level_name, logging.WARNING))

    if _handler is None:
        _handler = logging.StreamHandler()
        _handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(_handler)
        logger.propagate = False

    return logger
