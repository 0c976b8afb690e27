"""
Store Factory
Centralizes the logic for selecting the storage adapters.
"""

import logging

from mnemo.application.config import AppConfig
from mnemo.domain.ports import CardStore, SessionHistoryStore

from .json_store import JsonCardStore, JsonSessionHistoryStore
from .memory_store import InMemoryCardStore, InMemorySessionHistoryStore

logger = logging.getLogger(__name__)


def build_stores(config: AppConfig) -> tuple[CardStore, SessionHistoryStore]:
    """
    Returns the card and session history stores selected by ``config.backend``.
    """
    if config.backend == "memory":
        logger.debug("Backend: memory")
        return InMemoryCardStore(), InMemorySessionHistoryStore()

    logger.debug(f"Backend: json ({config.data_dir})")
    return JsonCardStore(config.data_dir), JsonSessionHistoryStore(config.data_dir)
