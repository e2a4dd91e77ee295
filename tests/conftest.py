"""Root conftest — shared test configuration."""

import os

import pytest

from lnpulse.config import get_settings

# Ensure tests never read a developer's real node credentials
os.environ.setdefault("LNPULSE_LND_REST_URL", "https://lnd.test:8080")
os.environ.setdefault("LNPULSE_LOG_FORMAT", "text")


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
