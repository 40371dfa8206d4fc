"""Pytest fixtures for config module tests."""

from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest


@pytest.fixture
def options_environ() -> dict[str, str]:
    """Provide an environment that sets every codec option.

    Returns
    -------
    dict[str, str]
        Environment mapping with ``ENVBIND_``-prefixed options.
    """
    return {
        "ENVBIND_SEPARATOR": ".",
        "ENVBIND_SEQUENCE_SEPARATOR": "__",
        "ENVBIND_LIST_DELIMITER": ";",
        "ENVBIND_PRESERVE_ORDER": "false",
        "ENVBIND_PREFIX": "APP_",
        "PATH": "/usr/bin",
    }


@pytest.fixture
def restore_envbind_logger() -> Iterator[logging.Logger]:
    """Restore the ``envbind`` logger after a test reconfigures it.

    Yields
    ------
    logging.Logger
        The package logger.
    """
    logger = logging.getLogger("envbind")
    handlers = list(logger.handlers)
    level = logger.level
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(level)
