"""
Session Manager Factory
Wires configuration, stores and the session manager together.
"""

from mnemo.application.config import AppConfig
from mnemo.application.session_manager import ReviewSessionManager
from mnemo.infrastructure.adapters.factory import build_stores


def get_session_manager(config: AppConfig) -> ReviewSessionManager:
    """
    Returns a ReviewSessionManager over the stores selected by config.
    """
    card_store, history_store = build_stores(config)
    return ReviewSessionManager(
        card_store,
        history_store,
        seconds_per_card=config.seconds_per_card,
        default_card_limit=config.default_card_limit,
    )
