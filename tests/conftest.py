"""
Pytest configuration and fixtures.

This file provides pytest-specific configuration and fixtures.
For database helpers shared with unittest-style tests, see tests/__init__.py
"""

import pytest

from tests import make_session_factory


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "db: marks tests that use the in-memory SQLite database"
    )


@pytest.fixture
def session_factory():
    """Session factory bound to a fresh in-memory database."""
    return make_session_factory()
