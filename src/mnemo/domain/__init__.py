# Domain Package
from .errors import (
    CardNotFoundError,
    InvalidQualityError,
    MnemoError,
    NoActiveSessionError,
    SessionAlreadyActiveError,
)
from .models import (
    Card,
    CardStats,
    CardUpdate,
    LearningStats,
    Quality,
    ReviewedCard,
    ReviewSession,
    SessionStats,
    TimeRange,
    apply_update,
    merge_content,
    utc_now,
)
from .ports import CardStore, SessionHistoryStore

__all__ = [
    "Card",
    "CardStats",
    "CardUpdate",
    "LearningStats",
    "Quality",
    "ReviewedCard",
    "ReviewSession",
    "SessionStats",
    "TimeRange",
    "apply_update",
    "merge_content",
    "utc_now",
    "CardStore",
    "SessionHistoryStore",
    "MnemoError",
    "InvalidQualityError",
    "NoActiveSessionError",
    "CardNotFoundError",
    "SessionAlreadyActiveError",
]
