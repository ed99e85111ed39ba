"""
Store for platforms without a finished storage integration.

The browser-embedded database is not wired up yet. Until then this store
answers every request with an explicit failure, which callers handle like
any other missing or unreadable document.
"""
from __future__ import annotations

from typing import Any, Optional

from notekeep.repositories.base import DocumentStore, LoadResult


class UnavailableDocumentStore(DocumentStore):
    def try_load(self, key: str) -> LoadResult:
        return LoadResult.failure()

    def try_serialize_and_save(self, key: str, document: Any) -> bool:
        return False

    def exists(self, key: str) -> bool:
        return False

    def try_read_bytes(self, key: str) -> Optional[bytes]:
        return None
