"""Shared fixtures."""

# Standard library imports
import logging
import os

# Third-party imports
import pytest

# Local/package imports
from goldfish.config import clear_settings


@pytest.fixture(autouse=True)
def clean_state(monkeypatch):
    """Isolate each test from GOLDFISH_ variables and CLI-installed log handlers."""
    for key in list(os.environ):
        if key.startswith("GOLDFISH_"):
            monkeypatch.delenv(key)
    clear_settings()
    yield
    clear_settings()
    logger = logging.getLogger("goldfish")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
