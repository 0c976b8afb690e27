"""Shared builders for tests."""

from dataclasses import replace
from datetime import UTC, datetime, timedelta

from mnemo.domain.models import Card

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=UTC)


class FakeClock:
    """Settable clock for deterministic scheduling."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def make_card(
    card_id: str,
    overdue_days: float = 0,
    ease_factor: float = 2.5,
    category: str = "",
    now: datetime = NOW,
    **kwargs,
) -> Card:
    """A card that became due ``overdue_days`` before ``now`` (negative = not yet due)."""
    card = Card(
        id=card_id,
        question=f"Q {card_id}",
        answer=f"A {card_id}",
        category=category,
        ease_factor=ease_factor,
        next_review_at=now - timedelta(days=overdue_days),
        created_at=now - timedelta(days=30),
    )
    return replace(card, **kwargs) if kwargs else card
