from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make the notekeep package importable during local test runs
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from notekeep.core import config as core_config  # noqa: E402
from notekeep.db import models  # noqa: E402
from notekeep.db import session as db_session  # noqa: E402
from notekeep.services import container  # noqa: E402


def _clear_caches() -> None:
    core_config.get_settings.cache_clear()
    db_session.get_engine.cache_clear()
    db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]
    container.get_repository_storage_service.cache_clear()


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Point the data directory at tmp_path so no test touches the real home directory."""
    data_dir = tmp_path / "data"
    monkeypatch.setenv("NOTEKEEP_DATA_DIR", str(data_dir))
    monkeypatch.setenv("APP_ENV", "dev")
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("NOTEKEEP_STORAGE_BACKEND", raising=False)
    monkeypatch.delenv("NOTEKEEP_LANGUAGE", raising=False)
    _clear_caches()
    yield data_dir
    _clear_caches()


@pytest.fixture()
def temp_db(tmp_path, monkeypatch):
    """Temporary SQLite database with full teardown so the file is not left locked on Windows."""
    db_file = tmp_path / "test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_file}")
    _clear_caches()

    engine = db_session.get_engine()
    models.Base.metadata.drop_all(bind=engine)
    models.Base.metadata.create_all(bind=engine)

    yield db_file

    try:
        models.Base.metadata.drop_all(bind=engine)
    except Exception:
        pass
    try:
        engine.dispose()
    except Exception:
        pass
    _clear_caches()
    if db_file.exists():
        try:
            db_file.unlink()
        except Exception:
            pass
