"""
Domain models for cards, review sessions and learning statistics.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import IntEnum, StrEnum

from .constants import INITIAL_EASE_FACTOR


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


class Quality(IntEnum):
    """Self-rated recall grade for a single review event."""

    COMPLETE_BLACKOUT = 0  # Complete failure to recall
    INCORRECT_HARD = 1  # Incorrect, but remembered upon seeing the answer
    INCORRECT_EASY = 2  # Incorrect, but the answer seemed easy
    CORRECT_HARD = 3  # Correct, with serious difficulty
    CORRECT_MEDIUM = 4  # Correct, after hesitation
    CORRECT_EASY = 5  # Perfect response


class TimeRange(StrEnum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    ALL = "all"


@dataclass(frozen=True)
class CardStats:
    """
    Aggregate review statistics for a card.

    Attributes:
        total_reviews: Number of review events.
        correct_reviews: Reviews with quality >= 3.
        incorrect_reviews: Reviews with quality < 3.
        average_response_time: Mean response time in seconds.
        last_response_time: Response time of the latest review in seconds.
        streak: Consecutive successful reviews.
        lapses: Times the card was forgotten.
    """

    total_reviews: int = 0
    correct_reviews: int = 0
    incorrect_reviews: int = 0
    average_response_time: float = 0.0
    last_response_time: float = 0.0
    streak: int = 0
    lapses: int = 0


@dataclass(frozen=True)
class Card:
    """
    A single learnable fact together with its SM-2 scheduling state.

    A card is due when ``next_review_at <= now``.
    """

    id: str
    question: str
    answer: str
    content_id: str = ""
    category: str = ""
    tags: frozenset[str] = frozenset()
    difficulty: int = 3  # 1-5, author-assigned

    # Scheduling state
    ease_factor: float = INITIAL_EASE_FACTOR
    interval: int = 0  # Days
    repetitions: int = 0  # Consecutive successful recalls
    last_reviewed_at: datetime | None = None
    next_review_at: datetime = field(default_factory=utc_now)
    created_at: datetime = field(default_factory=utc_now)

    stats: CardStats = field(default_factory=CardStats)


@dataclass(frozen=True)
class CardUpdate:
    """Partial card update produced by the scheduler for one review."""

    ease_factor: float
    interval: int
    repetitions: int
    last_reviewed_at: datetime
    next_review_at: datetime
    stats: CardStats


def apply_update(card: Card, update: CardUpdate) -> Card:
    """Merge a scheduler update into a new Card value."""
    return replace(
        card,
        ease_factor=update.ease_factor,
        interval=update.interval,
        repetitions=update.repetitions,
        last_reviewed_at=update.last_reviewed_at,
        next_review_at=update.next_review_at,
        stats=update.stats,
    )


def merge_content(existing: Card, incoming: Card) -> Card:
    """
    Take the authored fields of ``incoming`` onto ``existing``.

    Scheduling state, stats and ``created_at`` stay those of ``existing``.
    """
    return replace(
        existing,
        question=incoming.question,
        answer=incoming.answer,
        content_id=incoming.content_id,
        category=incoming.category,
        tags=incoming.tags,
        difficulty=incoming.difficulty,
    )


@dataclass(frozen=True)
class ReviewedCard:
    """One entry of a session's append-only review log."""

    card_id: str
    quality: int
    response_time: float
    reviewed_at: datetime


@dataclass(frozen=True)
class SessionStats:
    total_cards: int = 0
    reviewed_cards: int = 0
    correct_cards: int = 0
    incorrect_cards: int = 0
    average_quality: float = 0.0
    average_response_time: float = 0.0
    estimated_time_remaining: int = 0  # Seconds


@dataclass
class ReviewSession:
    """
    One bounded interactive study session.

    The card sequence is chosen at start; its membership only shrinks via skips.
    ``current_card_index == len(cards)`` signals an exhausted session.
    """

    id: str
    started_at: datetime
    cards: list[Card] = field(default_factory=list)
    current_card_index: int = 0
    reviewed_cards: list[ReviewedCard] = field(default_factory=list)
    session_stats: SessionStats = field(default_factory=SessionStats)
    completed_at: datetime | None = None

    def index_of(self, card_id: str) -> int | None:
        for i, card in enumerate(self.cards):
            if card.id == card_id:
                return i
        return None


@dataclass(frozen=True)
class LearningStats:
    """Aggregate outcomes over completed sessions."""

    total_sessions: int
    total_cards_reviewed: int
    average_accuracy: float  # Percent
    average_session_minutes: float
    streak: int  # Consecutive days
