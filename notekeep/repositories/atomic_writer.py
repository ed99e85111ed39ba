"""
File writer which only replaces an existing file with completely written content.

The process can be killed at any moment (mobile platforms do so freely).
Writing straight into the target would then leave a truncated file and
destroy the previous content. Instead the content goes to ``<file>.new``,
a ``<file>.ready`` marker is created once that file is complete, and only
then the target is replaced. A leftover marker means a complete file is
waiting to replace the target; it blocks further writes until
``complete_pending_write`` has run.

The writer does not lock; concurrent writers of the same file must be
serialized by the caller.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, BinaryIO

TEMP_SUFFIX = ".new"
READY_SUFFIX = ".ready"


class UnfinishedAtomicWriteError(Exception):
    """Raised when a pending write blocks writing to a file."""

    def __init__(self, path: str | os.PathLike):
        self.path = str(path)
        super().__init__(
            f"The file '{self.path}' cannot be written, because there is an unfinished file writing operation pending."
        )


def temp_path(path: Path) -> Path:
    return path.with_name(path.name + TEMP_SUFFIX)


def ready_path(path: Path) -> Path:
    return path.with_name(path.name + READY_SUFFIX)


class AtomicFileWriter:
    def write(self, path: str | os.PathLike, writer: Callable[[BinaryIO], None]) -> None:
        target = Path(path)
        if not str(path).strip():
            raise ValueError("path must not be empty")
        target.parent.mkdir(parents=True, exist_ok=True)

        if ready_path(target).exists():
            raise UnfinishedAtomicWriteError(target)

        tmp = temp_path(target)
        with tmp.open("wb") as stream:
            writer(stream)
            stream.flush()
            os.fsync(stream.fileno())

        ready_path(target).write_bytes(b" ")
        self.complete_pending_write(target)

    def complete_pending_write(self, path: str | os.PathLike) -> None:
        """Finish a write that was interrupted after the temp file was complete."""
        target = Path(path)
        ready = ready_path(target)
        if not ready.exists():
            return

        tmp = temp_path(target)
        if tmp.exists():
            os.replace(tmp, target)
        ready.unlink()
