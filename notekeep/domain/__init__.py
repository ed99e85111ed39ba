"""Domain model of the note repository (notes, revisions, XML mapping)."""

from .notes import (
    CURRENT_SAVING_REVISION,
    INVALID_REPOSITORY,
    NEWEST_SUPPORTED_REVISION,
    Note,
    NoteRepository,
    NoteType,
)
from .updater import NoteRepositoryUpdater

__all__ = [
    "CURRENT_SAVING_REVISION",
    "INVALID_REPOSITORY",
    "NEWEST_SUPPORTED_REVISION",
    "Note",
    "NoteRepository",
    "NoteRepositoryUpdater",
    "NoteType",
]
