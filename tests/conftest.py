"""Pytest configuration for OrgPilot tests."""

import logging

import pytest

from orgpilot.config import reset_config


def pytest_collection_modifyitems(config, items):
    """Set per-marker timeouts: unit=1s, integration=5s."""
    for item in items:
        if "unit" in item.keywords:
            item.add_marker(pytest.mark.timeout(1))
        elif "integration" in item.keywords:
            item.add_marker(pytest.mark.timeout(5))


@pytest.fixture(autouse=True)
def _isolate_process_state(monkeypatch):
    """Keep config cache and logger handlers from leaking between tests."""
    monkeypatch.delenv("ORGPILOT_CONFIG", raising=False)
    monkeypatch.delenv("ORGPILOT_LOG_FILE", raising=False)
    monkeypatch.delenv("ORGPILOT_LOG_LEVEL", raising=False)
    reset_config()
    yield
    reset_config()
    orgpilot_logger = logging.getLogger("orgpilot")
    for handler in list(orgpilot_logger.handlers):
        orgpilot_logger.removeHandler(handler)
        handler.close()
    orgpilot_logger.propagate = True
    orgpilot_logger.setLevel(logging.NOTSET)
