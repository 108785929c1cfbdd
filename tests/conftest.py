"""Global pytest configuration (non-GUI fixtures only)."""

import logging

import pytest

pytest_plugins = ["tests.fixtures.timelines"]


@pytest.fixture
def engine_logs(caplog):
    """Capture warnings emitted by the timeline engine loggers."""
    caplog.set_level(logging.DEBUG, logger="timesifter")
    return caplog
