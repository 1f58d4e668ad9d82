# tests/test_api.py
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from harvester import crud
from harvester.db import get_db, get_session_factory
from harvester.main import app


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def seeded(db):
    for i in range(3):
        crud.upsert_entry(db, {"id": f"e{i}", "name": f"Film {i}", "category": "Filmy", "size_mb": 100.0 * i})
    base = datetime(2025, 1, 1)
    crud.record_stats(db, "e0", 10, 1, recorded_at=base)
    crud.record_stats(db, "e0", 15, 2, recorded_at=base + timedelta(hours=1))
    return db


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_entry_detail_and_404(client, seeded):
    body = client.get("/entries/e0").json()
    assert body["name"] == "Film 0"
    assert (body["seeds"], body["leeches"]) == (15, 2)
    assert client.get("/entries/missing").status_code == 404


def test_history(client, seeded):
    body = client.get("/entries/e0/history").json()
    assert [s["seeds"] for s in body] == [15, 10]
    assert client.get("/entries/missing/history").status_code == 404


def test_pagination_with_cursor(client, seeded):
    first = client.get("/entries", params={"limit": 2}).json()
    assert [e["id"] for e in first["items"]] == ["e2", "e1"]
    assert first["total"] == 3
    assert first["has_more"] is True

    second = client.get("/entries", params={"limit": 2, "after": first["next_cursor"]}).json()
    assert [e["id"] for e in second["items"]] == ["e0"]
    assert second["has_more"] is False
    assert second["has_previous"] is True
    assert second["next_cursor"] is None


def test_invalid_cursor(client, seeded):
    assert client.get("/entries", params={"after": "not-a-cursor"}).status_code == 400


def test_sort_and_lists(client, seeded):
    body = client.get("/entries", params={"sort": "SIZE_ASC"}).json()
    assert [e["id"] for e in body["items"]] == ["e0", "e1", "e2"]
    assert len(client.get("/entries/recent", params={"limit": 2}).json()) == 2
    assert [e["id"] for e in client.get("/entries/search", params={"q": "Film 1"}).json()] == ["e1"]
    assert len(client.get("/entries/category/Filmy").json()) == 3


def test_store_stats(client, seeded):
    body = client.get("/stats").json()
    assert body == {"total": 3, "categories": {"Filmy": 3}, "stats_records": 2}


def test_crawl_rejects_bad_config(client):
    assert client.post("/crawl", params={"workers": 0}).status_code == 400
    assert client.post("/crawl", params={"from_page": 2, "to_page": 1}).status_code == 400
