"""
Review Session Manager: Application layer orchestrator.

Sequences a batch of due cards through the scheduler, accumulates session
statistics and persists card and session state through the store ports.
"""

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import datetime, timedelta

from ulid import ULID

from mnemo.domain.constants import (
    DEFAULT_CARD_LIMIT,
    PASSING_QUALITY,
    SECONDS_PER_CARD_ESTIMATE,
    SKIP_DELAY_DAYS,
)
from mnemo.domain.errors import (
    CardNotFoundError,
    NoActiveSessionError,
    SessionAlreadyActiveError,
)
from mnemo.domain.models import (
    Card,
    LearningStats,
    ReviewedCard,
    ReviewSession,
    SessionStats,
    TimeRange,
    apply_update,
    merge_content,
    utc_now,
)
from mnemo.domain.ports import CardStore, SessionHistoryStore

from .learning_stats import compute_learning_stats
from .scheduler import calculate_next_review, select_due_cards, validate_quality

logger = logging.getLogger(__name__)


def incremental_mean(mean: float, count: int, value: float) -> float:
    """Mean of ``count`` values plus ``value``, given the mean of the first ``count``."""
    return (mean * count + value) / (count + 1)


class ReviewSessionManager:
    """
    Application service owning the active review session.

    At most one session is active. The history store's current-session pointer
    is the source of truth, so a fresh manager resumes a persisted session.
    """

    def __init__(
        self,
        card_store: CardStore,
        history_store: SessionHistoryStore,
        seconds_per_card: int = SECONDS_PER_CARD_ESTIMATE,
        default_card_limit: int = DEFAULT_CARD_LIMIT,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Args:
            card_store: Port for reading and writing cards.
            history_store: Port for the active session and completed history.
            seconds_per_card: Time budget used to estimate the remaining time.
            default_card_limit: Card limit when start_session is given none.
            clock: Source of "now"; injectable for tests.
        """
        self._cards = card_store
        self._history = history_store
        self._seconds_per_card = seconds_per_card
        self._default_card_limit = default_card_limit
        self._clock = clock
        self._session: ReviewSession | None = None
        self._lock = asyncio.Lock()

    @property
    def current_session(self) -> ReviewSession | None:
        """The session held in memory, without consulting the store."""
        return self._session

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_due_cards(
        self, category: str | None = None, limit: int | None = None
    ) -> list[Card]:
        """Due cards from the store, ranked by the selection policy."""
        cards = await self._cards.get_all(category)
        return select_due_cards(cards, self._clock(), limit=limit)

    async def get_card(self, card_id: str) -> Card | None:
        return await self._cards.get(card_id)

    async def add_cards(self, cards: Iterable[Card]) -> int:
        """
        Insert new cards and refresh the content of known ones.

        A card whose id is already stored keeps its scheduling state and stats;
        only its authored fields are replaced. Returns the number written.
        """
        existing = {c.id: c for c in await self._cards.get_all()}
        merged = [
            merge_content(existing[card.id], card) if card.id in existing else card
            for card in cards
        ]
        await self._cards.put_many(merged)

        updated = sum(1 for c in merged if c.id in existing)
        logger.info(f"Added {len(merged) - updated} cards, updated {updated}")
        return len(merged)

    async def resume_session(self) -> ReviewSession | None:
        """Load the persisted active session, if any."""
        if self._session is None:
            self._session = await self._history.get_current_session()
            if self._session is not None:
                logger.info(f"Resumed session {self._session.id}")
        return self._session

    async def get_current_card(self) -> Card | None:
        """
        The card under the cursor.

        Returns None when there is no session or the cursor has passed the
        last card, which signals the session is ready to end.
        """
        session = await self.resume_session()
        if session is None or session.current_card_index >= len(session.cards):
            return None
        return session.cards[session.current_card_index]

    async def get_learning_stats(self, time_range: TimeRange = TimeRange.ALL) -> LearningStats:
        sessions = await self._history.get_completed_sessions()
        return compute_learning_stats(sessions or [], time_range, self._clock())

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start_session(
        self, categories: Iterable[str] | None = None, card_limit: int | None = None
    ) -> ReviewSession:
        """
        Start a session over the highest-priority due cards.

        An empty due list yields a valid zero-length session.

        Raises:
            SessionAlreadyActiveError: If a session is already active.
        """
        async with self._lock:
            active = await self.resume_session()
            if active is not None:
                raise SessionAlreadyActiveError(active.id)

            limit = card_limit if card_limit is not None else self._default_card_limit
            cards = await self._collect_due_cards(list(categories or []), limit)
            now = self._clock()

            session = ReviewSession(
                id=str(ULID()),
                started_at=now,
                cards=cards,
                session_stats=SessionStats(
                    total_cards=len(cards),
                    estimated_time_remaining=len(cards) * self._seconds_per_card,
                ),
            )

            await self._history.set_current_session(session)
            self._session = session
            logger.info(f"Started session {session.id} with {len(cards)} cards")
            return session

    async def review_card(self, card_id: str, quality: int, response_time: float) -> Card:
        """
        Grade a card in the active session and advance the cursor.

        Returns:
            The updated card, as persisted to the card store.

        Raises:
            InvalidQualityError: If quality is outside [0, 5]. Nothing is mutated.
            NoActiveSessionError: If there is no active session.
            CardNotFoundError: If the card is not part of the session.
        """
        quality = validate_quality(quality)

        async with self._lock:
            session = await self._require_session()
            index = session.index_of(card_id)
            if index is None:
                raise CardNotFoundError(card_id)

            card = session.cards[index]
            now = self._clock()
            update = calculate_next_review(card, quality, now)
            updated = apply_update(card, update)
            updated = replace(
                updated,
                stats=replace(
                    updated.stats,
                    last_response_time=response_time,
                    average_response_time=incremental_mean(
                        card.stats.average_response_time,
                        card.stats.total_reviews,
                        response_time,
                    ),
                ),
            )

            await self._cards.put(updated)

            reviewed_before = len(session.reviewed_cards)
            stats = session.session_stats
            passed = quality >= PASSING_QUALITY
            session.cards[index] = updated
            session.current_card_index += 1
            session.reviewed_cards.append(
                ReviewedCard(
                    card_id=card_id,
                    quality=int(quality),
                    response_time=response_time,
                    reviewed_at=now,
                )
            )
            session.session_stats = replace(
                stats,
                reviewed_cards=reviewed_before + 1,
                correct_cards=stats.correct_cards + (1 if passed else 0),
                incorrect_cards=stats.incorrect_cards + (0 if passed else 1),
                average_quality=incremental_mean(stats.average_quality, reviewed_before, quality),
                average_response_time=incremental_mean(
                    stats.average_response_time, reviewed_before, response_time
                ),
                estimated_time_remaining=self._estimate_remaining(session),
            )

            await self._history.set_current_session(session)
            logger.debug(
                f"Reviewed {card_id} q={int(quality)} next={updated.next_review_at.isoformat()}"
            )
            return updated

    async def skip_card(self, card_id: str) -> Card:
        """
        Postpone a card to tomorrow and drop it from the rest of the session.

        Only cards at or after the cursor can be skipped; cards already behind
        it keep the schedule their review gave them. Ease factor, repetitions
        and card stats are untouched.

        Returns:
            The rescheduled card.

        Raises:
            NoActiveSessionError: If there is no active session.
            CardNotFoundError: If the card is not among the session's remaining cards.
        """
        async with self._lock:
            session = await self._require_session()
            index = session.index_of(card_id)
            if index is None or index < session.current_card_index:
                raise CardNotFoundError(card_id)

            card = session.cards[index]
            postponed = replace(
                card, next_review_at=self._clock() + timedelta(days=SKIP_DELAY_DAYS)
            )
            await self._cards.put(postponed)

            del session.cards[index]
            session.current_card_index = min(session.current_card_index, len(session.cards))
            session.session_stats = replace(
                session.session_stats,
                total_cards=len(session.cards),
                estimated_time_remaining=self._estimate_remaining(session),
            )

            await self._history.set_current_session(session)
            logger.info(f"Skipped {card_id} until {postponed.next_review_at.isoformat()}")
            return postponed

    async def end_session(self) -> SessionStats:
        """
        Complete the active session and archive it.

        The current-session pointer is cleared before the session is archived,
        so a failed archive never leaves a session both current and completed.
        If archiving fails the pointer is restored and the error propagates.

        Raises:
            NoActiveSessionError: If there is no active session, including on a
                second call after the session was ended.
        """
        async with self._lock:
            session = await self._require_session()
            completed = replace(session, completed_at=self._clock())

            await self._history.set_current_session(None)
            try:
                await self._history.append_completed_session(completed)
            except Exception:
                await self._history.set_current_session(session)
                raise
            self._session = None

            stats = completed.session_stats
            logger.info(
                f"Completed session {completed.id}: "
                f"{stats.correct_cards}/{stats.reviewed_cards} correct"
            )
            return stats

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _require_session(self) -> ReviewSession:
        session = await self.resume_session()
        if session is None:
            raise NoActiveSessionError()
        return session

    async def _collect_due_cards(self, categories: list[str], limit: int) -> list[Card]:
        if not categories:
            return await self.get_due_cards(limit=limit)

        merged: dict[str, Card] = {}
        for category in categories:
            for card in await self._cards.get_all(category):
                merged.setdefault(card.id, card)

        return select_due_cards(merged.values(), self._clock(), limit=limit)

    def _estimate_remaining(self, session: ReviewSession) -> int:
        remaining = len(session.cards) - session.current_card_index
        return max(0, remaining) * self._seconds_per_card
