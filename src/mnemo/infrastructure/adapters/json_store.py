"""
JSON file stores: Infrastructure adapters for a local data directory.

Each key lives in its own JSON document:
    cards.json               list of cards
    current_session.json     the active session (absent when idle)
    completed_sessions.json  append-only session history
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import TypeVar

from pydantic import TypeAdapter

from mnemo.domain.models import Card, ReviewSession
from mnemo.domain.ports import CardStore, SessionHistoryStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

CARDS_FILE = "cards.json"
CURRENT_SESSION_FILE = "current_session.json"
COMPLETED_SESSIONS_FILE = "completed_sessions.json"

_cards_adapter = TypeAdapter(list[Card])
_session_adapter = TypeAdapter(ReviewSession)
_sessions_adapter = TypeAdapter(list[ReviewSession])


def _read(path: Path, adapter: TypeAdapter[T]) -> T | None:
    """Decode a document, or None if it does not exist. Corrupt files raise."""
    if not path.exists():
        return None
    return adapter.validate_json(path.read_bytes())


def _write(path: Path, adapter: TypeAdapter[T], value: T) -> None:
    """Atomically replace a document."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(adapter.dump_json(value, indent=2))
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


class JsonCardStore(CardStore):
    """Card store backed by ``cards.json`` in the data directory."""

    def __init__(self, data_dir: Path):
        self.path = data_dir / CARDS_FILE

    async def get_all(self, category: str | None = None) -> list[Card]:
        cards = _read(self.path, _cards_adapter) or []
        if category is None:
            return cards
        return [c for c in cards if c.category == category]

    async def get(self, card_id: str) -> Card | None:
        for card in await self.get_all():
            if card.id == card_id:
                return card
        return None

    async def put(self, card: Card) -> None:
        cards = await self.get_all()
        for i, existing in enumerate(cards):
            if existing.id == card.id:
                cards[i] = card
                break
        else:
            cards.append(card)
        _write(self.path, _cards_adapter, cards)

    async def put_many(self, cards: list[Card]) -> None:
        """Bulk insert-or-replace with a single write."""
        if not cards:
            return
        by_id = {c.id: c for c in await self.get_all()}
        for card in cards:
            by_id[card.id] = card
        _write(self.path, _cards_adapter, list(by_id.values()))
        logger.info(f"Wrote {len(cards)} cards to {self.path}")


class JsonSessionHistoryStore(SessionHistoryStore):
    """Session pointer and history backed by JSON documents in the data directory."""

    def __init__(self, data_dir: Path):
        self.current_path = data_dir / CURRENT_SESSION_FILE
        self.completed_path = data_dir / COMPLETED_SESSIONS_FILE

    async def get_completed_sessions(self) -> list[ReviewSession]:
        return _read(self.completed_path, _sessions_adapter) or []

    async def append_completed_session(self, session: ReviewSession) -> None:
        sessions = await self.get_completed_sessions()
        sessions.append(session)
        _write(self.completed_path, _sessions_adapter, sessions)

    async def get_current_session(self) -> ReviewSession | None:
        return _read(self.current_path, _session_adapter)

    async def set_current_session(self, session: ReviewSession | None) -> None:
        if session is None:
            self.current_path.unlink(missing_ok=True)
            return
        _write(self.current_path, _session_adapter, session)
