"""Logging bootstrap for the mdtext command line."""

import logging
import os

_CONFIGURED = False


def _parse_level(raw):
    normalized = str(raw or "WARNING").strip().upper()
    level = getattr(logging, normalized, None)
    return level if isinstance(level, int) else logging.WARNING


def configure(level=None):
    """Attach a stderr handler to the mdtext logger hierarchy.

    The level comes from ``level`` or the MDTEXT_LOG_LEVEL environment
    variable. Idempotent: repeated calls return the configured logger.
    """
    global _CONFIGURED
    logger = logging.getLogger("mdtext")
    if _CONFIGURED:
        return logger

    resolved = _parse_level(level or os.environ.get("MDTEXT_LOG_LEVEL", "WARNING"))
    handler = logging.StreamHandler()
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter("[%(name)s] %(levelname)s %(message)s"))

    logger.setLevel(resolved)
    logger.propagate = False
    logger.handlers.clear()
    logger.addHandler(handler)
    logging.captureWarnings(True)

    _CONFIGURED = True
    return logger
