from __future__ import annotations

import xml.etree.ElementTree as ET

import pytest
from fastapi.testclient import TestClient

from notekeep.app import create_app
from notekeep.repositories.memory_store import MemoryDocumentStore
from notekeep.repositories.unavailable_store import UnavailableDocumentStore
from notekeep.services.language_service import LanguageService
from notekeep.services.repository_storage import EmbeddedRepositoryStorageService

REPO_ID = "3f2504e0-4f89-11d3-9a0c-0305e82c3301"
IMPORT_FILE = (
    f'<silentnotes id="{REPO_ID}" revision="7"><notes>'
    '<note id="6b29fc40-ca47-1067-b31d-00dd010662da"><html_content>x</html_content></note>'
    "</notes></silentnotes>"
).encode("utf-8")


def _client(store=None, language="en"):
    svc = EmbeddedRepositoryStorageService(store or MemoryDocumentStore(), LanguageService(language), file_name="repo.notekeep")
    return TestClient(create_app(storage_service=svc)), svc


def test_info_reports_location_and_backend():
    client, _ = _client()

    resp = client.get("/repository/info")

    assert resp.status_code == 200
    assert resp.json() == {"location": "", "backend": "file", "file_name": "repo.notekeep"}
    assert resp.headers["X-Content-Type-Options"] == "nosniff"


def test_summary_creates_default_repository():
    client, _ = _client()

    resp = client.get("/repository")

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "created_new_empty_repository"
    assert body["notes"] == 3
    assert body["tags"] == ["Getting started"]
    assert client.get("/repository").json()["status"] == "successfully_loaded"


def test_summary_of_invalid_repository_is_error():
    store = MemoryDocumentStore()
    store.try_serialize_and_save("repo.notekeep", ET.Element("broken"))
    client, _ = _client(store, language="de")

    resp = client.get("/repository")

    assert resp.status_code == 500
    assert resp.json()["detail"].startswith("Die Notizen konnten nicht gelesen werden")


def test_file_download():
    client, svc = _client()
    assert client.get("/repository/file").status_code == 404

    client.get("/repository")
    resp = client.get("/repository/file")

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("application/xml")
    assert 'filename="repo.notekeep"' in resp.headers["content-disposition"]
    assert ET.fromstring(resp.content).get("id") == svc.load_repository_or_default()[1].id


def test_import_replaces_repository():
    client, svc = _client()

    resp = client.post("/repository/import", content=IMPORT_FILE)

    assert resp.status_code == 200
    assert resp.json() == {"ok": True, "message": "Successfully imported 1 notes.", "notes": 1}
    assert svc.load_repository_or_default()[1].id == REPO_ID


@pytest.mark.parametrize(
    "content",
    [
        b"",
        b"<silentnotes",
        b'<silentnotes revision="7" />',
        f'<silentnotes id="{REPO_ID}" revision="7"><notes /></silentnotes>'.encode("utf-8"),
        IMPORT_FILE.replace(b"<note ", b'<note created_at="0001-01-01T00:30:00+01:00" '),
    ],
)
def test_import_rejects_invalid_content(content):
    client, svc = _client()
    _, before = svc.load_repository_or_default()

    resp = client.post("/repository/import", content=content)

    assert resp.status_code == 400
    assert resp.json()["detail"] == "The file does not contain valid notes."
    svc.clear_cache()
    assert len(svc.load_repository_or_default()[1].notes) == len(before.notes) == 3


def test_import_of_newer_revision_asks_for_update():
    client, _ = _client()

    resp = client.post("/repository/import", content=IMPORT_FILE.replace(b'revision="7"', b'revision="99"'))

    assert resp.status_code == 400
    assert resp.json()["detail"].startswith("Please update the application")


def test_import_fails_when_store_is_unavailable():
    client, _ = _client(UnavailableDocumentStore())

    resp = client.post("/repository/import", content=IMPORT_FILE)

    assert resp.status_code == 500


def test_damaged_repository_can_still_be_downloaded():
    store = MemoryDocumentStore()
    client, _ = _client(store)
    store._documents["repo.notekeep"] = b"<silentnotes revision='7'><notes>"

    assert client.get("/repository").status_code == 500
    resp = client.get("/repository/file")

    assert resp.status_code == 200
    assert resp.content == b"<silentnotes revision='7'><notes>"


def test_reload_clears_cache():
    store = MemoryDocumentStore()
    client, _ = _client(store)
    client.get("/repository")
    store.try_serialize_and_save(
        "repo.notekeep", ET.fromstring(f'<silentnotes id="{REPO_ID}" revision="7"><notes /></silentnotes>')
    )

    assert client.get("/repository").json()["id"] != REPO_ID
    assert client.post("/repository/reload").json() == {"ok": True}
    assert client.get("/repository").json()["id"] == REPO_ID
