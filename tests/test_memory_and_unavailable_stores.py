from __future__ import annotations

import xml.etree.ElementTree as ET

import pytest

from notekeep.repositories.base import LoadResult
from notekeep.repositories.memory_store import MemoryDocumentStore
from notekeep.repositories.unavailable_store import UnavailableDocumentStore


def test_load_result_unpacks_and_validates():
    element = ET.Element("a")

    success, document = LoadResult.ok(element)
    assert success is True and document is element
    assert bool(LoadResult.failure()) is False
    with pytest.raises(ValueError):
        LoadResult(True, None)
    with pytest.raises(ValueError):
        LoadResult(False, element)


def test_memory_store_returns_independent_copies():
    store = MemoryDocumentStore()
    original = ET.fromstring('<note id="1"><tag>a</tag></note>')
    store.try_serialize_and_save("notes.xml", original)

    _, first = store.try_load("notes.xml")
    first.set("id", "changed")
    _, second = store.try_load("notes.xml")

    assert second.get("id") == "1"
    assert original.get("id") == "1"


def test_memory_store_keys_are_separate():
    store = MemoryDocumentStore()
    store.try_serialize_and_save("a.xml", ET.Element("a"))

    assert store.exists("a.xml") is True
    assert store.exists("b.xml") is False
    assert store.try_load("b.xml").success is False
    assert store.try_serialize_and_save("", ET.Element("a")) is False
    assert store.try_serialize_and_save("c.xml", "not xml") is False
    assert store.exists("c.xml") is False


@pytest.mark.parametrize("key", ["notes.xml", "", "any/path/repo.notekeep"])
def test_unavailable_store_always_fails(key):
    store = UnavailableDocumentStore()

    for _ in range(3):
        result = store.try_load(key)
        assert result.success is False
        assert result.document is None
        assert store.try_serialize_and_save(key, ET.Element("silentnotes")) is False
        assert store.exists(key) is False


def test_read_bytes():
    store = MemoryDocumentStore()
    store.try_serialize_and_save("a.xml", ET.Element("a"))

    assert ET.fromstring(store.try_read_bytes("a.xml")).tag == "a"
    assert store.try_read_bytes("b.xml") is None
    assert UnavailableDocumentStore().try_read_bytes("a.xml") is None
