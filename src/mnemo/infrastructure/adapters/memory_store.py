"""
In-memory stores: Infrastructure adapters holding state in process.

Sessions are deep-copied on the way in and out so callers never share
mutable state with the store, matching the behaviour of a persistent backend.
Cards are immutable and stored as-is.
"""

import copy

from mnemo.domain.models import Card, ReviewSession
from mnemo.domain.ports import CardStore, SessionHistoryStore


class InMemoryCardStore(CardStore):
    def __init__(self, cards: list[Card] | None = None):
        self._cards: dict[str, Card] = {c.id: c for c in cards or []}

    async def get_all(self, category: str | None = None) -> list[Card]:
        return [c for c in self._cards.values() if category is None or c.category == category]

    async def get(self, card_id: str) -> Card | None:
        return self._cards.get(card_id)

    async def put(self, card: Card) -> None:
        self._cards[card.id] = card


class InMemorySessionHistoryStore(SessionHistoryStore):
    def __init__(self):
        self._completed: list[ReviewSession] = []
        self._current: ReviewSession | None = None

    async def get_completed_sessions(self) -> list[ReviewSession]:
        return copy.deepcopy(self._completed)

    async def append_completed_session(self, session: ReviewSession) -> None:
        self._completed.append(copy.deepcopy(session))

    async def get_current_session(self) -> ReviewSession | None:
        return copy.deepcopy(self._current)

    async def set_current_session(self, session: ReviewSession | None) -> None:
        self._current = copy.deepcopy(session)
