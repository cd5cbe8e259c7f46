"""Post storage adapters."""

from emojifeed.adapters.storage.base import DEFAULT_LIMIT, AbstractPostStore
from emojifeed.adapters.storage.in_memory import InMemoryPostStore
from emojifeed.adapters.storage.postgres import PostgresPostStore

__all__ = [
    "DEFAULT_LIMIT",
    "AbstractPostStore",
    "InMemoryPostStore",
    "PostgresPostStore",
]
