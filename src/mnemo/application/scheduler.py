"""
SM-2 scheduler and due-card selection policy.

This is a pure computation module with no I/O.
"""

import logging
import math
from collections.abc import Iterable
from dataclasses import replace
from datetime import datetime, timedelta

from mnemo.domain.constants import (
    FIRST_INTERVAL_DAYS,
    LAPSE_INTERVAL_DAYS,
    MAX_QUALITY,
    MIN_EASE_FACTOR,
    MIN_QUALITY,
    PASSING_QUALITY,
    SECOND_INTERVAL_DAYS,
    SECONDS_PER_DAY,
)
from mnemo.domain.errors import InvalidQualityError
from mnemo.domain.models import Card, CardUpdate, Quality, utc_now

logger = logging.getLogger(__name__)


def validate_quality(quality: object) -> Quality:
    """Coerce a 0-5 integer into a Quality, raising InvalidQualityError otherwise."""
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidQualityError(quality)
    if quality < MIN_QUALITY or quality > MAX_QUALITY:
        raise InvalidQualityError(quality)
    return Quality(quality)


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def next_ease_factor(ease_factor: float, quality: int) -> float:
    """
    EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02)), floored at 1.3.
    """
    miss = MAX_QUALITY - quality
    return max(MIN_EASE_FACTOR, ease_factor + (0.1 - miss * (0.08 + miss * 0.02)))


def calculate_next_review(card: Card, quality: int, now: datetime | None = None) -> CardUpdate:
    """
    Compute the scheduling outcome of reviewing ``card`` with ``quality``.

    Args:
        card: Current card state. Only the scheduling fields and stats are read.
        quality: Recall grade, 0 (blackout) to 5 (perfect).
        now: Review instant; defaults to the current UTC time.

    Returns:
        CardUpdate with new ease factor, interval, repetitions, timestamps and stats.
        Response-time stats are left untouched; the session manager owns them.

    Raises:
        InvalidQualityError: If quality is not an integer in [0, 5].
    """
    q = validate_quality(quality)
    now = now or utc_now()

    repetitions = card.repetitions
    if q < PASSING_QUALITY:
        # Forgotten: restart the learning phase
        repetitions = 0
        interval = LAPSE_INTERVAL_DAYS
    else:
        if repetitions == 0:
            interval = FIRST_INTERVAL_DAYS
        elif repetitions == 1:
            interval = SECOND_INTERVAL_DAYS
        else:
            interval = max(FIRST_INTERVAL_DAYS, round_half_up(card.interval * card.ease_factor))
        repetitions += 1

    ease_factor = next_ease_factor(card.ease_factor, q)

    stats = card.stats
    if q >= PASSING_QUALITY:
        stats = replace(
            stats,
            total_reviews=stats.total_reviews + 1,
            correct_reviews=stats.correct_reviews + 1,
            streak=stats.streak + 1,
        )
    else:
        stats = replace(
            stats,
            total_reviews=stats.total_reviews + 1,
            incorrect_reviews=stats.incorrect_reviews + 1,
            streak=0,
            lapses=stats.lapses + 1,
        )

    logger.debug(
        f"card={card.id} q={int(q)} interval {card.interval}->{interval} "
        f"ef {card.ease_factor:.3f}->{ease_factor:.3f}"
    )

    return CardUpdate(
        ease_factor=ease_factor,
        interval=interval,
        repetitions=repetitions,
        last_reviewed_at=now,
        next_review_at=now + timedelta(days=interval),
        stats=stats,
    )


def preview_outcomes(card: Card, now: datetime | None = None) -> dict[Quality, CardUpdate]:
    """Scheduling outcome for every possible quality, without touching the card."""
    now = now or utc_now()
    return {q: calculate_next_review(card, q, now) for q in Quality}


def days_overdue(card: Card, now: datetime) -> int:
    """Whole days since the card became due (negative if not yet due)."""
    return math.floor((now - card.next_review_at).total_seconds() / SECONDS_PER_DAY)


def is_due(card: Card, now: datetime) -> bool:
    return card.next_review_at <= now


def select_due_cards(
    cards: Iterable[Card],
    now: datetime | None = None,
    categories: Iterable[str] | None = None,
    limit: int | None = None,
) -> list[Card]:
    """
    Filter to due cards and rank them for review.

    Ordering: most days overdue first, then lowest ease factor (hardest) first.
    Ties keep their input order. The limit is applied after sorting.

    Args:
        cards: Candidate cards.
        now: Reference instant; defaults to the current UTC time.
        categories: If given, only cards in one of these categories are kept.
        limit: Maximum number of cards to return. None, zero or a negative
            value means no limit.
    """
    now = now or utc_now()
    wanted = set(categories) if categories else None

    due = [
        card
        for card in cards
        if is_due(card, now) and (wanted is None or card.category in wanted)
    ]
    due.sort(key=lambda c: (-days_overdue(c, now), c.ease_factor))

    if limit is not None and limit > 0:
        return due[:limit]
    return due
