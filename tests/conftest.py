"""Shared pytest configuration."""

import pytest

from depgraph.log_config import clear_context, configure_logging


@pytest.fixture(autouse=True, scope="session")
def quiet_logging():
    """Keep per-operation debug events out of the test output."""
    configure_logging(level="WARNING", json_logs=True)
    yield
    clear_context()
