"""Shared fixtures for the unit tests."""

from __future__ import annotations

import logging

import pytest

from sql_interrogator.telemetry.profiling import ProfileCollector


@pytest.fixture(autouse=True)
def _reset_collector():
    """Ensure a fresh collector singleton for each test."""
    ProfileCollector.reset()
    yield
    ProfileCollector.reset()


@pytest.fixture()
def restore_root_logger():
    """Put the root logger's handlers and level back after the test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
