"""
Pytest configuration for fixture_engine tests.
"""

import pytest

from tests.utils import NOW, at, make_fixture


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def old_trafford():
    """Man Utd vs Liverpool, 2025-03-01 15:00 UTC, John Smith in the middle."""
    return make_fixture(id="A", when=at("2025-03-01T15:00:00"), main="John Smith")


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    for name in ("FIXTURE_ENGINE_CONFIG", "FIXTURE_ENGINE_BASE_URL", "FIXTURE_ENGINE_TOKEN"):
        monkeypatch.delenv(name, raising=False)
