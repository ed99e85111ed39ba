from __future__ import annotations

import xml.etree.ElementTree as ET

from notekeep.core.config import get_settings
from notekeep.db.models import StoredDocument
from notekeep.db.session import _get_sessionmaker, get_engine, get_session
from notekeep.repositories.sql_store import SqlDocumentStore


def test_save_and_load_document(temp_db):
    store = SqlDocumentStore()

    assert store.try_serialize_and_save("notes.xml", ET.fromstring('<note id="1"/>')) is True

    success, document = store.try_load("notes.xml")
    assert success is True
    assert document.tag == "note"
    assert document.get("id") == "1"
    assert store.exists("notes.xml") is True


def test_missing_key(temp_db):
    store = SqlDocumentStore()

    assert store.try_load("missing.xml").success is False
    assert store.exists("missing.xml") is False


def test_second_save_updates_row(temp_db):
    store = SqlDocumentStore()
    store.try_serialize_and_save("notes.xml", ET.fromstring('<note id="1"/>'))
    store.try_serialize_and_save("notes.xml", ET.fromstring('<note id="2"/>'))

    _, document = store.try_load("notes.xml")
    assert document.get("id") == "2"
    with get_session() as session:
        assert session.query(StoredDocument).count() == 1


def test_invalid_stored_content_is_failure(temp_db):
    with get_session() as session:
        session.add(StoredDocument(key="broken.xml", content="<note"))
        session.commit()
    store = SqlDocumentStore()

    success, document = store.try_load("broken.xml")

    assert success is False
    assert document is None
    assert store.exists("broken.xml") is True


def test_schema_is_created_on_first_use(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'fresh' / 'notes.db'}")
    get_settings.cache_clear()
    get_engine.cache_clear()
    _get_sessionmaker.cache_clear()
    store = SqlDocumentStore()

    assert store.exists("notes.xml") is False
    assert store.try_serialize_and_save("notes.xml", ET.Element("silentnotes")) is True
    assert (tmp_path / "fresh" / "notes.db").exists()


def test_empty_key_and_bad_document(temp_db):
    store = SqlDocumentStore()

    assert store.try_load("").success is False
    assert store.exists("  ") is False
    assert store.try_serialize_and_save("", ET.Element("a")) is False
    assert store.try_serialize_and_save("notes.xml", 42) is False
    assert store.exists("notes.xml") is False


def test_keys_are_used_verbatim(temp_db):
    store = SqlDocumentStore()

    assert store.try_serialize_and_save(" notes.xml ", ET.Element("a")) is True

    assert store.try_load("notes.xml").success is False
    assert store.exists("notes.xml") is False
    assert store.try_load(" notes.xml ").document.tag == "a"


def test_read_bytes_returns_stored_content(temp_db):
    with get_session() as session:
        session.add(StoredDocument(key="broken.xml", content="<note"))
        session.commit()
    store = SqlDocumentStore()

    assert store.try_read_bytes("broken.xml") == b"<note"
    assert store.try_read_bytes("missing.xml") is None
    assert store.try_read_bytes("") is None
