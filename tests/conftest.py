"""Shared pytest configuration and fixtures for tests."""

import sys
from pathlib import Path

import pytest

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from later.core import service  # noqa: E402


@pytest.fixture(autouse=True)
def later_home(tmp_path, monkeypatch):
    """Every test gets its own Later home (database, config, preferences)."""
    home = tmp_path / "later-home"
    monkeypatch.setenv("LATER_HOME", str(home))
    for key in ("LATER_DB_PATH", "LATER_ROLE", "LATER_USER_ID", "LATER_LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)
    return home


@pytest.fixture
def anonymous(monkeypatch):
    """Run as an anonymous user (creation limits apply)."""
    monkeypatch.setenv("LATER_ROLE", "anonymous")


@pytest.fixture
def space():
    """A fresh space that is also the current one."""
    created = service.create_space("Test space")
    service.set_current_space(created.id)
    return created
