import pytest

from mnemo.application.session_manager import ReviewSessionManager
from mnemo.infrastructure.adapters.memory_store import (
    InMemoryCardStore,
    InMemorySessionHistoryStore,
)
from tests.factories import NOW, FakeClock


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def card_store():
    return InMemoryCardStore()


@pytest.fixture
def history_store():
    return InMemorySessionHistoryStore()


@pytest.fixture
def manager(card_store, history_store, clock):
    return ReviewSessionManager(card_store, history_store, clock=clock)


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Isolate config from the real user and environment
    monkeypatch.setenv("HOME", str(home))
    for var in ("MNEMO_DATA_DIR", "MNEMO_BACKEND", "MNEMO_VERBOSE",
                "MNEMO_DEFAULT_CARD_LIMIT", "MNEMO_SECONDS_PER_CARD"):
        monkeypatch.delenv(var, raising=False)
    return home
