"""
Document store contract shared by every storage backend.

A store persists one named XML document per key. All three operations are
total: faults of the underlying medium (missing file, permission denied,
parse error, backend not implemented) are absorbed and reported as a
failed result, so callers can branch on the outcome instead of handling
exceptions.
"""
from __future__ import annotations

import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterator, Optional


@dataclass(frozen=True)
class LoadResult:
    """Outcome of a load; unpacks as ``(success, document)``."""

    success: bool
    document: Optional[ET.Element] = None

    def __post_init__(self) -> None:
        if self.success and self.document is None:
            raise ValueError("A successful load must carry a document")
        if not self.success and self.document is not None:
            raise ValueError("A failed load cannot carry a document")

    @classmethod
    def ok(cls, document: ET.Element) -> "LoadResult":
        return cls(True, document)

    @classmethod
    def failure(cls) -> "LoadResult":
        return cls(False, None)

    def __iter__(self) -> Iterator[Any]:
        yield self.success
        yield self.document

    def __bool__(self) -> bool:
        return self.success


class DocumentStore(ABC):
    """Platform specific persistence of XML documents."""

    @abstractmethod
    def try_load(self, key: str) -> LoadResult:
        """Load and parse the document stored under key."""

    @abstractmethod
    def try_serialize_and_save(self, key: str, document: Any) -> bool:
        """Serialize document and store it durably under key."""

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Whether a document is currently retrievable for key."""

    @abstractmethod
    def try_read_bytes(self, key: str) -> Optional[bytes]:
        """Stored content of key exactly as persisted, even when it does not parse; None when absent."""
