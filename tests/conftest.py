from __future__ import annotations

import logging
from typing import Iterator

import pytest

from tests._fixtures.providers import TaskRecorder


@pytest.fixture
def recorder() -> TaskRecorder:
    """Provide a fresh task recorder for each test."""
    return TaskRecorder()


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    """Undo configure_logging so caplog keeps receiving manifestrun records."""
    yield
    logger = logging.getLogger("manifestrun")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
