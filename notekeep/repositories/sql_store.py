"""Embedded database backend: one row per document, backed by SQLAlchemy."""
from __future__ import annotations

import threading
import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import select

from notekeep.core.logging import get_logger
from notekeep.db.create_tables import create_all
from notekeep.db.models import StoredDocument
from notekeep.db.session import get_session
from notekeep.domain.xml_utils import load_from_bytes, serialize_to_bytes
from notekeep.repositories.base import DocumentStore, LoadResult

logger = get_logger(__name__)


class SqlDocumentStore(DocumentStore):
    """Keeps the serialized XML of each document in the ``documents`` table."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._schema_ready = False

    def _ensure_schema(self) -> None:
        if not self._schema_ready:
            create_all()
            self._schema_ready = True

    @staticmethod
    def _check_key(key: str) -> str:
        if not key or not key.strip():
            raise ValueError("key must not be empty")
        return key

    def try_load(self, key: str) -> LoadResult:
        with self._lock:
            try:
                key_value = self._check_key(key)
                self._ensure_schema()
                with get_session() as session:
                    entity = session.get(StoredDocument, key_value)
                    content = entity.content if entity else None
                if content is None:
                    logger.debug("No document stored for %r", key_value)
                    return LoadResult.failure()
                return LoadResult.ok(load_from_bytes(content))
            except ET.ParseError as exc:
                logger.warning("Invalid XML stored for %r: %s", key, exc)
                return LoadResult.failure()
            except Exception as exc:
                logger.warning("Could not load document %r: %s", key, exc)
                return LoadResult.failure()

    def try_serialize_and_save(self, key: str, document: Any) -> bool:
        with self._lock:
            try:
                key_value = self._check_key(key)
                content = serialize_to_bytes(document).decode("utf-8")
                self._ensure_schema()
                now = datetime.now(timezone.utc)
                with get_session() as session:
                    entity = session.get(StoredDocument, key_value)
                    if not entity:
                        session.add(StoredDocument(key=key_value, content=content, updated_at=now))
                    else:
                        entity.content = content
                        entity.updated_at = now
                    session.commit()
                return True
            except Exception as exc:
                logger.warning("Could not save document %r: %s", key, exc)
                return False

    def exists(self, key: str) -> bool:
        with self._lock:
            try:
                key_value = self._check_key(key)
                self._ensure_schema()
                with get_session() as session:
                    stmt = select(StoredDocument.key).where(StoredDocument.key == key_value).limit(1)
                    return session.execute(stmt).first() is not None
            except Exception as exc:
                logger.warning("Could not check document %r: %s", key, exc)
                return False

    def try_read_bytes(self, key: str) -> Optional[bytes]:
        with self._lock:
            try:
                key_value = self._check_key(key)
                self._ensure_schema()
                with get_session() as session:
                    entity = session.get(StoredDocument, key_value)
                    return entity.content.encode("utf-8") if entity else None
            except Exception as exc:
                logger.warning("Could not read document %r: %s", key, exc)
                return None
