"""Shared fixtures for mdtext tests."""

import logging

import pytest

from mdtext import log


@pytest.fixture
def restore_mdtext_logger():
    """Undo mdtext.log.configure() so later tests still see records via caplog."""
    logger = logging.getLogger("mdtext")
    saved = (logger.level, logger.propagate, list(logger.handlers))
    yield logger
    logger.setLevel(saved[0])
    logger.propagate = saved[1]
    logger.handlers[:] = saved[2]
    log._CONFIGURED = False
