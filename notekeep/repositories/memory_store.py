"""In-process backend, used where no persistent medium is wanted (tests, demos)."""
from __future__ import annotations

import threading
from typing import Any, Optional

from notekeep.core.logging import get_logger
from notekeep.domain.xml_utils import load_from_bytes, serialize_to_bytes
from notekeep.repositories.base import DocumentStore, LoadResult

logger = get_logger(__name__)


class MemoryDocumentStore(DocumentStore):
    """Keeps serialized bytes per key, so every load returns a fresh tree."""

    def __init__(self) -> None:
        self._documents: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def try_load(self, key: str) -> LoadResult:
        try:
            with self._lock:
                content = self._documents.get(key) if key else None
            if content is None:
                return LoadResult.failure()
            return LoadResult.ok(load_from_bytes(content))
        except Exception as exc:
            logger.warning("Could not load document %r: %s", key, exc)
            return LoadResult.failure()

    def try_serialize_and_save(self, key: str, document: Any) -> bool:
        try:
            if not key:
                return False
            content = serialize_to_bytes(document)
            with self._lock:
                self._documents[key] = content
            return True
        except Exception as exc:
            logger.warning("Could not save document %r: %s", key, exc)
            return False

    def exists(self, key: str) -> bool:
        try:
            with self._lock:
                return bool(key) and key in self._documents
        except TypeError:
            return False

    def try_read_bytes(self, key: str) -> Optional[bytes]:
        try:
            with self._lock:
                return self._documents.get(key) if key else None
        except TypeError:
            return None
