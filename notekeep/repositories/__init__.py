"""
Persistence adapters.

Each module implements the DocumentStore contract for one medium
(filesystem, embedded database, memory, or none at all). Services depend on
the contract and never touch the medium directly.
"""

from .base import DocumentStore, LoadResult
from .file_store import XmlFileStore
from .memory_store import MemoryDocumentStore
from .sql_store import SqlDocumentStore
from .unavailable_store import UnavailableDocumentStore

__all__ = [
    "DocumentStore",
    "LoadResult",
    "MemoryDocumentStore",
    "SqlDocumentStore",
    "UnavailableDocumentStore",
    "XmlFileStore",
]
