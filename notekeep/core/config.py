"""
Configuration helpers for the notekeep backend.

Settings are read once from environment variables so that stores, services
and routers never fetch os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
import os

STORAGE_BACKENDS = ("file", "sql", "memory", "browser")


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    storage_backend: str
    data_dir: str
    database_url: str
    language: str
    log_level: str

    @property
    def is_release(self) -> bool:
        return self.app_env == "prod"

    @property
    def repository_file_name(self) -> str:
        if self.is_release:
            return "notekeep_repository.notekeep"
        return "notekeep_repository_dev.notekeep"


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _choice(value: str | None, choices: tuple[str, ...], default: str) -> str:
        candidate = (value or "").strip().lower()
        return candidate if candidate in choices else default

    data_dir = os.path.expanduser(os.getenv("NOTEKEEP_DATA_DIR") or str(Path.home() / ".notekeep"))
    database_url = (os.getenv("DATABASE_URL") or "").strip()
    if not database_url:
        database_url = f"sqlite:///{Path(data_dir) / 'notekeep.db'}"

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        storage_backend=_choice(os.getenv("NOTEKEEP_STORAGE_BACKEND"), STORAGE_BACKENDS, "file"),
        data_dir=data_dir,
        database_url=database_url,
        language=(os.getenv("NOTEKEEP_LANGUAGE") or "en").strip().lower()[:2] or "en",
        log_level=(os.getenv("NOTEKEEP_LOG_LEVEL") or "INFO").upper(),
    )
