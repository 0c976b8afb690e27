"""Load cards from YAML deck files.

Deck format::

    category: Geography        # optional deck-wide default
    cards:
      - question: Capital of France?
        answer: Paris
        tags: [europe]
      - id: 01J...             # optional stable id
        question: ...
        answer: ...
        category: Rivers
        difficulty: 4
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any

import yaml
from ulid import ULID

from mnemo.domain.errors import MnemoError
from mnemo.domain.models import Card, utc_now

logger = logging.getLogger(__name__)


class DeckFormatError(MnemoError):
    pass


def generate_card_id() -> str:
    """Generate a stable card ID using ULID."""
    return str(ULID())


def _as_tags(raw: Any) -> frozenset[str]:
    if raw is None:
        return frozenset()
    if isinstance(raw, str):
        return frozenset(t for t in raw.replace(",", " ").split() if t)
    if isinstance(raw, list):
        return frozenset(str(t).strip() for t in raw if str(t).strip())
    raise DeckFormatError(f"tags must be a list or string, got {type(raw).__name__}")


def _as_difficulty(raw: Any, position: int) -> int:
    if isinstance(raw, bool):
        raise DeckFormatError(f"Card #{position}: difficulty must be an integer, got {raw!r}")
    try:
        return int(raw)
    except (TypeError, ValueError) as e:
        raise DeckFormatError(
            f"Card #{position}: difficulty must be an integer, got {raw!r}"
        ) from e


def parse_deck(text: str, now: datetime | None = None) -> list[Card]:
    """
    Parse a YAML deck into new cards, due immediately.

    Raises:
        DeckFormatError: If the YAML is malformed or a card lacks question/answer.
    """
    now = now or utc_now()
    try:
        meta = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise DeckFormatError(f"Invalid YAML: {e}") from e

    if not isinstance(meta, dict) or not isinstance(meta.get("cards"), list):
        raise DeckFormatError("Deck must be a mapping with a 'cards' list")

    default_category = str(meta.get("category") or "")
    cards: list[Card] = []

    for i, item in enumerate(meta["cards"]):
        if not isinstance(item, dict):
            raise DeckFormatError(f"Card #{i + 1} is not a mapping")

        question = str(item.get("question") or "").strip()
        answer = str(item.get("answer") or "").strip()
        if not question or not answer:
            raise DeckFormatError(f"Card #{i + 1} needs both 'question' and 'answer'")

        cards.append(
            Card(
                id=str(item.get("id") or generate_card_id()),
                question=question,
                answer=answer,
                content_id=str(item.get("content_id") or ""),
                category=str(item.get("category") or default_category),
                tags=_as_tags(item.get("tags")),
                difficulty=_as_difficulty(item.get("difficulty", 3), i + 1),
                next_review_at=now,
                created_at=now,
            )
        )

    return cards


def load_deck(path: Path, now: datetime | None = None) -> list[Card]:
    cards = parse_deck(path.read_text(encoding="utf-8"), now)
    logger.info(f"Parsed {len(cards)} cards from {path}")
    return cards
