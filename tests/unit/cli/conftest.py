"""Fixtures for CLI tests.

Disables Rich console styling to ensure consistent output across environments.
"""

from __future__ import annotations

import logging

import pytest


@pytest.fixture(autouse=True)
def disable_rich_colors(monkeypatch):
    """Disable Rich colors/styling for consistent CLI output in CI."""
    monkeypatch.setenv("NO_COLOR", "1")
    monkeypatch.setenv("TERM", "dumb")


@pytest.fixture(autouse=True)
def restore_root_logger():
    """The root callback reconfigures logging on every invocation."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
