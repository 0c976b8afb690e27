import json
from datetime import timedelta

import pytest
from pydantic import ValidationError

from mnemo.application.config import AppConfig
from mnemo.domain.models import CardStats, ReviewedCard, ReviewSession, SessionStats
from mnemo.infrastructure.adapters.factory import build_stores
from mnemo.infrastructure.adapters.json_store import (
    CARDS_FILE,
    JsonCardStore,
    JsonSessionHistoryStore,
)
from mnemo.infrastructure.adapters.memory_store import (
    InMemoryCardStore,
    InMemorySessionHistoryStore,
)
from tests.factories import NOW, make_card


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / "data"


def make_session(session_id: str = "s1") -> ReviewSession:
    card = make_card("a", overdue_days=2, tags=frozenset({"x", "y"}))
    return ReviewSession(
        id=session_id,
        started_at=NOW,
        cards=[card],
        current_card_index=1,
        reviewed_cards=[ReviewedCard("a", 4, 2.5, NOW + timedelta(seconds=5))],
        session_stats=SessionStats(total_cards=1, reviewed_cards=1, correct_cards=1),
    )


# --- JsonCardStore ---


@pytest.mark.asyncio
async def test_card_store_round_trip(data_dir):
    store = JsonCardStore(data_dir)
    card = make_card(
        "a",
        category="geo",
        tags=frozenset({"europe"}),
        last_reviewed_at=NOW,
        stats=CardStats(total_reviews=3, correct_reviews=2, average_response_time=1.5),
    )

    await store.put(card)

    reloaded = await JsonCardStore(data_dir).get("a")
    assert reloaded == card
    assert reloaded.next_review_at.tzinfo is not None


@pytest.mark.asyncio
async def test_card_store_put_replaces(data_dir):
    store = JsonCardStore(data_dir)
    await store.put(make_card("a", ease_factor=2.5))
    await store.put(make_card("b"))
    await store.put(make_card("a", ease_factor=1.9))

    cards = await store.get_all()
    assert [c.id for c in cards] == ["a", "b"]
    assert cards[0].ease_factor == 1.9


@pytest.mark.asyncio
async def test_card_store_category_filter(data_dir):
    store = JsonCardStore(data_dir)
    await store.put_many([make_card("a", category="geo"), make_card("b", category="art")])

    assert [c.id for c in await store.get_all("art")] == ["b"]


@pytest.mark.asyncio
async def test_card_store_missing_file_is_empty(data_dir):
    store = JsonCardStore(data_dir)

    assert await store.get_all() == []
    assert await store.get("a") is None


@pytest.mark.asyncio
async def test_card_store_corrupt_file_raises(data_dir):
    data_dir.mkdir()
    (data_dir / CARDS_FILE).write_text("{not json")

    with pytest.raises(ValidationError):
        await JsonCardStore(data_dir).get_all()


@pytest.mark.asyncio
async def test_card_store_writes_plain_json(data_dir):
    await JsonCardStore(data_dir).put(make_card("a", tags=frozenset({"t"})))

    raw = json.loads((data_dir / CARDS_FILE).read_text())
    assert raw[0]["id"] == "a"
    assert raw[0]["tags"] == ["t"]
    assert list(data_dir.iterdir()) == [data_dir / CARDS_FILE]


# --- JsonSessionHistoryStore ---


@pytest.mark.asyncio
async def test_current_session_round_trip(data_dir):
    store = JsonSessionHistoryStore(data_dir)
    session = make_session()

    await store.set_current_session(session)
    assert await JsonSessionHistoryStore(data_dir).get_current_session() == session

    await store.set_current_session(None)
    assert await store.get_current_session() is None
    assert not store.current_path.exists()


@pytest.mark.asyncio
async def test_clear_without_current_session(data_dir):
    await JsonSessionHistoryStore(data_dir).set_current_session(None)


@pytest.mark.asyncio
async def test_completed_sessions_append(data_dir):
    store = JsonSessionHistoryStore(data_dir)
    assert await store.get_completed_sessions() == []

    await store.append_completed_session(make_session("s1"))
    await store.append_completed_session(make_session("s2"))

    sessions = await JsonSessionHistoryStore(data_dir).get_completed_sessions()
    assert [s.id for s in sessions] == ["s1", "s2"]
    assert sessions[0].reviewed_cards[0].response_time == 2.5


# --- In-memory stores ---


@pytest.mark.asyncio
async def test_memory_history_store_isolates_callers():
    store = InMemorySessionHistoryStore()
    session = make_session()
    await store.set_current_session(session)

    session.current_card_index = 99
    stored = await store.get_current_session()
    assert stored.current_card_index == 1

    stored.current_card_index = 42
    assert (await store.get_current_session()).current_card_index == 1


@pytest.mark.asyncio
async def test_memory_card_store():
    store = InMemoryCardStore([make_card("a", category="geo"), make_card("b")])

    assert [c.id for c in await store.get_all("geo")] == ["a"]
    await store.put(make_card("b", ease_factor=1.5))
    assert (await store.get("b")).ease_factor == 1.5


# --- factory ---


def test_build_stores_json(mock_home, data_dir):
    cards, history = build_stores(AppConfig(data_dir=data_dir))

    assert isinstance(cards, JsonCardStore)
    assert isinstance(history, JsonSessionHistoryStore)
    assert cards.path == data_dir.resolve() / CARDS_FILE


def test_build_stores_memory(mock_home):
    cards, history = build_stores(AppConfig(backend="memory"))

    assert isinstance(cards, InMemoryCardStore)
    assert isinstance(history, InMemorySessionHistoryStore)
