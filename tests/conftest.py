"""Shared pytest fixtures."""

from __future__ import annotations

import pytest
import structlog


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Undo ``configure_logging`` so no test logs into a closed capture stream."""
    yield
    structlog.reset_defaults()
