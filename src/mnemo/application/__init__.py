# Application Package
from .learning_stats import compute_learning_stats
from .scheduler import calculate_next_review, preview_outcomes, select_due_cards
from .session_manager import ReviewSessionManager

__all__ = [
    "calculate_next_review",
    "preview_outcomes",
    "select_due_cards",
    "compute_learning_stats",
    "ReviewSessionManager",
]
