"""
Ports (interfaces) for card and session persistence.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod

from .models import Card, ReviewSession


class CardStore(ABC):
    """
    Port for reading and writing cards.

    Implementations:
        - InMemoryCardStore: Process-local dict, for tests and embedding.
        - JsonCardStore: A JSON document in the data directory.
    """

    @abstractmethod
    async def get_all(self, category: str | None = None) -> list[Card]:
        """
        Fetch every card, optionally restricted to one category.

        Returns:
            Cards in store order.
        """
        pass

    @abstractmethod
    async def get(self, card_id: str) -> Card | None:
        pass

    @abstractmethod
    async def put(self, card: Card) -> None:
        """Insert or replace a card by id."""
        pass

    async def put_many(self, cards: list[Card]) -> None:
        """
        Insert or replace several cards.

        Adapters with a costly write path override this to write once.
        """
        for card in cards:
            await self.put(card)


class SessionHistoryStore(ABC):
    """
    Port for the active-session pointer and the completed-session history.
    """

    @abstractmethod
    async def get_completed_sessions(self) -> list[ReviewSession]:
        """
        Returns:
            Completed sessions in the order they were appended. Empty if none.
        """
        pass

    @abstractmethod
    async def append_completed_session(self, session: ReviewSession) -> None:
        pass

    @abstractmethod
    async def get_current_session(self) -> ReviewSession | None:
        pass

    @abstractmethod
    async def set_current_session(self, session: ReviewSession | None) -> None:
        """Replace the active session, or clear it with None."""
        pass
