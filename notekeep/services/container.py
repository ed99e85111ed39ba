"""
Composition root: picks the document store and repository service of this process.

The backend is chosen once from Settings.storage_backend; nothing else in
the application inspects which store it is talking to.
"""
from __future__ import annotations

from functools import lru_cache

from notekeep.core.config import Settings, get_settings
from notekeep.core.logging import get_logger
from notekeep.repositories.file_store import XmlFileStore
from notekeep.repositories.memory_store import MemoryDocumentStore
from notekeep.repositories.sql_store import SqlDocumentStore
from notekeep.repositories.unavailable_store import UnavailableDocumentStore
from notekeep.services.language_service import LanguageService
from notekeep.services.repository_storage import (
    EmbeddedRepositoryStorageService,
    FileRepositoryStorageService,
    RepositoryStorageServiceBase,
    SqlRepositoryStorageService,
)

logger = get_logger(__name__)


def build_repository_storage_service(settings: Settings | None = None) -> RepositoryStorageServiceBase:
    settings = settings or get_settings()
    language = LanguageService(settings.language)
    backend = settings.storage_backend
    file_name = settings.repository_file_name

    if backend == "sql":
        service = SqlRepositoryStorageService(
            SqlDocumentStore(), language, settings.database_url, file_name=file_name
        )
    elif backend == "memory":
        service = EmbeddedRepositoryStorageService(MemoryDocumentStore(), language, file_name=file_name)
    elif backend == "browser":
        service = EmbeddedRepositoryStorageService(UnavailableDocumentStore(), language, file_name=file_name)
    else:
        service = FileRepositoryStorageService(XmlFileStore(), language, settings.data_dir, file_name=file_name)

    logger.info("Repository storage backend: %s (%s)", backend, service.get_location() or "no location")
    return service


@lru_cache
def get_repository_storage_service() -> RepositoryStorageServiceBase:
    return build_repository_storage_service()
