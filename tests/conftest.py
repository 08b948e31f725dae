"""Shared test fixtures."""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path

import pytest

from toolbridge.hooks import reset_global_hook_runner


@pytest.fixture
def temp_dir() -> Path:
    """Temporary directory for filesystem-based tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True)
def clean_global_hook_runner():
    """Keep the process-wide hook runner from leaking between tests."""
    reset_global_hook_runner()
    yield
    reset_global_hook_runner()


@pytest.fixture(autouse=True)
def clean_toolbridge_logger():
    """Drop handlers the CLI installs so caplog sees a plain logger tree."""
    logger = logging.getLogger("toolbridge")
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
