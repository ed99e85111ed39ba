"""
Loading and saving of the note repository.

The services in this module are platform agnostic: they talk to a
DocumentStore and never to the storage medium itself. Platform subclasses
only decide what ``get_location`` reports.
"""
from __future__ import annotations

import os
import threading
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional, Tuple

from sqlalchemy.engine import make_url

from notekeep.core.config import get_settings
from notekeep.core.logging import get_logger
from notekeep.domain.notes import (
    INVALID_REPOSITORY,
    NEWEST_SUPPORTED_REVISION,
    Note,
    NoteRepository,
    NoteType,
)
from notekeep.domain.updater import NoteRepositoryUpdater
from notekeep.domain.xml_utils import load_from_bytes
from notekeep.repositories.base import DocumentStore
from notekeep.services.language_service import LanguageServiceBase

logger = get_logger(__name__)


class RepositoryLoadStatus(str, Enum):
    SUCCESSFULLY_LOADED = "successfully_loaded"
    CREATED_NEW_EMPTY_REPOSITORY = "created_new_empty_repository"
    INVALID_REPOSITORY = "invalid_repository"


class RepositoryStorageServiceBase(ABC):
    """Loads, migrates, caches and saves the note repository through a DocumentStore."""

    def __init__(
        self,
        document_store: DocumentStore,
        language_service: LanguageServiceBase,
        *,
        file_name: str | None = None,
        updater: NoteRepositoryUpdater | None = None,
    ) -> None:
        self.document_store = document_store
        self.language_service = language_service
        self.file_name = file_name or get_settings().repository_file_name
        self.updater = updater or NoteRepositoryUpdater()
        self._cached: Optional[NoteRepository] = None
        self._lock = threading.RLock()

    @abstractmethod
    def get_location(self) -> str:
        """Human readable place where the repository is stored, empty when there is none."""

    def repository_key(self) -> str:
        location = self.get_location()
        return os.path.join(location, self.file_name) if location else self.file_name

    def load_repository_or_default(self) -> Tuple[RepositoryLoadStatus, NoteRepository]:
        """
        Return the cached repository, or load it from the store.

        A missing repository is replaced by a new one with welcome notes. An
        existing but unreadable repository is never overwritten; the
        INVALID_REPOSITORY sentinel is returned instead.
        """
        with self._lock:
            if self._cached is not None:
                if self._cached is INVALID_REPOSITORY:
                    return RepositoryLoadStatus.INVALID_REPOSITORY, self._cached
                return RepositoryLoadStatus.SUCCESSFULLY_LOADED, self._cached

            model_was_updated = False
            try:
                key = self.repository_key()
                if self.document_store.exists(key):
                    success, xml = self.document_store.try_load(key)
                    if not success:
                        raise ValueError("Invalid XML")
                    model_was_updated = self.updater.update(xml)
                    repository = NoteRepository.from_xml(xml)
                    status = RepositoryLoadStatus.SUCCESSFULLY_LOADED
                else:
                    repository = NoteRepository(revision=NEWEST_SUPPORTED_REVISION)
                    self._add_welcome_notes(repository)
                    model_was_updated = True
                    status = RepositoryLoadStatus.CREATED_NEW_EMPTY_REPOSITORY
            except Exception as exc:
                logger.error("Could not load the note repository: %s", exc)
                status = RepositoryLoadStatus.INVALID_REPOSITORY
                repository = INVALID_REPOSITORY
                model_was_updated = False

            if model_was_updated:
                self.try_save_repository(repository)
            self._cached = repository
            return status, repository

    def try_save_repository(self, repository: NoteRepository) -> bool:
        if repository is INVALID_REPOSITORY:
            return False
        with self._lock:
            try:
                success = self.document_store.try_serialize_and_save(self.repository_key(), repository)
            except Exception as exc:
                logger.warning("Could not save the note repository: %s", exc)
                return False
            if success:
                self._cached = repository
            return success

    def clear_cache(self) -> None:
        with self._lock:
            self._cached = None

    def load_repository_file(self) -> Optional[bytes]:
        """Stored repository exactly as persisted, so even a damaged one can be exported or recovered."""
        content = self.document_store.try_read_bytes(self.repository_key())
        return content or None

    def try_load_repository_from_file(self, content: bytes) -> Tuple[bool, Optional[NoteRepository]]:
        """
        Read a repository from an imported file.

        Files newer than this app and repositories without notes are
        rejected, the latter rules out valid but unrelated XML.
        """
        try:
            xml = load_from_bytes(content)
            if self.updater.is_too_new_for_this_app(xml):
                logger.warning("Repository file has revision %s, newer than supported", xml.get("revision"))
                return False, None
            self.updater.update(xml)
            repository = NoteRepository.from_xml(xml)
        except Exception as exc:
            logger.info("Content is not a valid repository: %s", exc)
            return False, None
        if not repository.notes:
            logger.info("Repository file contains no notes")
            return False, None
        return True, repository

    def is_too_new_repository_file(self, content: bytes) -> bool:
        try:
            return self.updater.is_too_new_for_this_app(load_from_bytes(content))
        except Exception:
            return False

    def _add_welcome_notes(self, repository: NoteRepository) -> None:
        texts = self.language_service
        repository.notes.extend([
            Note(html_content=texts.load_text("welcome_note"), background_color="#fbf4c1"),
            Note(html_content=texts.load_text("welcome_note_2"), background_color="#d9f8c8"),
            Note(
                html_content=texts.load_text("welcome_note_3"),
                background_color="#d0f8f9",
                note_type=NoteType.CHECKLIST,
                tags=[texts.load_text("welcome_note_tag")],
            ),
        ])


class FileRepositoryStorageService(RepositoryStorageServiceBase):
    """Desktop and mobile platforms, the repository is a file in ``directory``."""

    def __init__(self, document_store: DocumentStore, language_service: LanguageServiceBase, directory: str, **kwargs) -> None:
        super().__init__(document_store, language_service, **kwargs)
        self.directory = str(directory)

    def get_location(self) -> str:
        return self.directory


class SqlRepositoryStorageService(RepositoryStorageServiceBase):
    """Repository kept in an embedded database, reported by its URL."""

    def __init__(self, document_store: DocumentStore, language_service: LanguageServiceBase, database_url: str, **kwargs) -> None:
        super().__init__(document_store, language_service, **kwargs)
        self.database_url = database_url

    def get_location(self) -> str:
        try:
            return make_url(self.database_url).render_as_string(hide_password=True)
        except Exception:
            return ""

    def repository_key(self) -> str:
        # the URL is only diagnostic, rows are keyed by file name
        return self.file_name


class EmbeddedRepositoryStorageService(RepositoryStorageServiceBase):
    """Browser-embedded and in-memory storage, which have no meaningful location."""

    def get_location(self) -> str:
        return ""
