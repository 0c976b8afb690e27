# Infrastructure Store Adapters Package
from .json_store import JsonCardStore, JsonSessionHistoryStore
from .memory_store import InMemoryCardStore, InMemorySessionHistoryStore

__all__ = [
    "InMemoryCardStore",
    "InMemorySessionHistoryStore",
    "JsonCardStore",
    "JsonSessionHistoryStore",
]
