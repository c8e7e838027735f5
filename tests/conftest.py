"""
Shared pytest configuration for the trade analytics tests.
"""

import logging

import pytest


def pytest_configure(config):
    """Configure pytest with custom settings."""
    config.addinivalue_line(
        "markers", "essential: mark test as essential for production readiness"
    )


def pytest_collection_modifyitems(config, items):
    """Modify test collection to mark essential tests."""
    for item in items:
        if "essential" in item.nodeid:
            item.add_marker(pytest.mark.essential)


@pytest.fixture(autouse=True)
def _no_config_env(monkeypatch):
    """Keep a developer's CONFIG_ENV from leaking into Config() in tests."""
    monkeypatch.delenv("CONFIG_ENV", raising=False)


@pytest.fixture
def quiet_logging(caplog):
    caplog.set_level(logging.WARNING)
    return caplog
