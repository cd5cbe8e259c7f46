"""Author directory adapters - abstract over the external identity service."""

from emojifeed.adapters.directory.base import AbstractAuthorDirectory
from emojifeed.adapters.directory.http_client import HttpAuthorDirectory
from emojifeed.adapters.directory.in_memory import InMemoryAuthorDirectory

__all__ = [
    "AbstractAuthorDirectory",
    "HttpAuthorDirectory",
    "InMemoryAuthorDirectory",
]
