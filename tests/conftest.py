"""Shared pytest fixtures."""

import pytest
import structlog


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Undo configure_logging() so loggers never hold a stale captured stream."""
    yield
    structlog.reset_defaults()
