"""Filesystem backend: one XML file per key, written atomically."""
from __future__ import annotations

import shutil
import threading
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Optional

from notekeep.core.logging import get_logger
from notekeep.domain.xml_utils import load_from_bytes, serialize_to_bytes
from notekeep.repositories.atomic_writer import AtomicFileWriter
from notekeep.repositories.base import DocumentStore, LoadResult

logger = get_logger(__name__)

# a file shorter than this cannot hold a repository, 0 byte files are never accepted
LEGACY_MIN_VALID_SIZE = 22
LEGACY_SUFFIXES = (".old", ".new")


class XmlFileStore(DocumentStore):
    """
    Stores documents as UTF-8 XML files.

    Keys are paths. Relative keys are resolved below ``root`` when one is
    given, otherwise against the working directory.
    """

    def __init__(self, root: str | Path | None = None, writer: AtomicFileWriter | None = None) -> None:
        self.root = Path(root) if root else None
        self.writer = writer or AtomicFileWriter()
        self._lock = threading.Lock()

    def _path(self, key: str) -> Path:
        if not key or not str(key).strip():
            raise ValueError("key must not be empty")
        path = Path(key)
        if self.root is not None and not path.is_absolute():
            path = self.root / path
        return path

    def try_load(self, key: str) -> LoadResult:
        with self._lock:
            try:
                path = self._path(key)
                self.writer.complete_pending_write(path)
                if not path.is_file():
                    logger.debug("No document at %s", path)
                    return LoadResult.failure()
                try:
                    return LoadResult.ok(load_from_bytes(path.read_bytes()))
                except (ET.ParseError, ValueError) as exc:
                    logger.warning("Invalid XML in %s: %s", path, exc)
                    recovered = self._try_recover_legacy(path)
                    return LoadResult.ok(recovered) if recovered is not None else LoadResult.failure()
            except Exception as exc:
                logger.warning("Could not load document %r: %s", key, exc)
                return LoadResult.failure()

    def try_serialize_and_save(self, key: str, document: Any) -> bool:
        with self._lock:
            try:
                path = self._path(key)
                content = serialize_to_bytes(document)
                self.writer.write(path, lambda stream: stream.write(content))
                return True
            except Exception as exc:
                logger.warning("Could not save document %r: %s", key, exc)
                return False

    def exists(self, key: str) -> bool:
        with self._lock:
            try:
                path = self._path(key)
                self.writer.complete_pending_write(path)
                return path.is_file()
            except Exception as exc:
                logger.warning("Could not check document %r: %s", key, exc)
                return False

    def try_read_bytes(self, key: str) -> Optional[bytes]:
        with self._lock:
            try:
                path = self._path(key)
                self.writer.complete_pending_write(path)
                return path.read_bytes() if path.is_file() else None
            except Exception as exc:
                logger.warning("Could not read document %r: %s", key, exc)
                return None

    def _try_recover_legacy(self, path: Path) -> Optional[ET.Element]:
        """
        Recover from a copy left behind by writers which predate the atomic writer.

        Those could leave an empty target file when the process was killed
        while writing. A parseable copy is put back in place of the target.
        """
        for suffix in LEGACY_SUFFIXES:
            candidate = path.with_name(path.name + suffix)
            if not candidate.is_file() or candidate.stat().st_size < LEGACY_MIN_VALID_SIZE:
                continue
            try:
                document = load_from_bytes(candidate.read_bytes())
            except (ET.ParseError, ValueError):
                continue
            shutil.copyfile(candidate, path)
            logger.info("Recovered %s from %s", path, candidate.name)
            return document
        return None
