"""
Tests for the paste HTTP endpoints.
"""
from datetime import timedelta

import pytest

from pastebin.config import settings
from pastebin.ids import DEFAULT_ALPHABET
from tests.conftest import NOW, to_ms

HEADERS = {"x-test-now-ms": to_ms(NOW)}


def create(client, headers=HEADERS, **body):
    body.setdefault("content", "hello")
    return client.post("/api/pastes", json=body, headers=headers)


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["endpoints"]["pastes"] == "/api/pastes"


def test_healthz(client):
    response = client.get("/api/healthz")
    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_create_and_fetch(client, monkeypatch):
    monkeypatch.setattr(settings, "APP_DOMAIN", "https://paste.example/")

    response = create(client, title="Greeting", syntax="text")
    assert response.status_code == 201
    data = response.json()
    assert data["url"] == f"https://paste.example/api/pastes/{data['id']}"
    assert data["title"] == "Greeting"
    assert data["expiration_type"] == "never"
    assert data["expires_at"] is None
    assert data["view_count"] == 0

    fetched = client.get(f"/api/pastes/{data['id']}", headers=HEADERS)
    assert fetched.status_code == 200
    body = fetched.json()
    assert body["content"] == "hello"
    assert body["view_count"] == 1
    assert body["last_view"] is False


def test_accepts_snake_case_keys(client):
    response = client.post(
        "/api/pastes",
        json={"content": "x", "expiration_type": "views", "max_views": 2},
        headers=HEADERS,
    )
    assert response.status_code == 201
    assert response.json()["max_views"] == 2


def test_single_view_scenario(client):
    paste_id = create(client, expirationType="views", maxViews=1).json()["id"]

    first = client.get(f"/api/pastes/{paste_id}", headers=HEADERS)
    assert first.status_code == 200
    assert first.json()["content"] == "hello"
    assert first.json()["last_view"] is True
    assert "last allowed view" in first.json()["message"]

    second = client.get(f"/api/pastes/{paste_id}", headers=HEADERS)
    assert second.status_code == 410
    assert second.json()["detail"] == "This paste has reached its maximum view count"


def test_time_expiry_scenario(client):
    paste_id = create(client, content="x", expirationType="time", expirationMinutes=10).json()["id"]

    later = {"x-test-now-ms": to_ms(NOW + timedelta(minutes=11))}
    response = client.get(f"/api/pastes/{paste_id}", headers=later)

    assert response.status_code == 410
    assert response.json()["detail"] == "This paste has expired due to time limit"

    meta = client.get(f"/api/pastes/{paste_id}/meta", headers=HEADERS)
    assert meta.json()["view_count"] == 0


def test_clock_header_ignored_outside_test_mode(client, monkeypatch):
    monkeypatch.setattr(settings, "TEST_MODE", False)
    paste_id = create(client, expirationType="time", expirationMinutes=10).json()["id"]

    far_future = {"x-test-now-ms": to_ms(NOW + timedelta(days=3650))}
    assert client.get(f"/api/pastes/{paste_id}", headers=far_future).status_code == 200


def test_views_without_max_views(client):
    response = create(client, expirationType="views")
    assert response.status_code == 400
    assert response.json()["field"] == "maxViews"
    assert "Max views" in response.json()["detail"]


def test_expiration_minutes_over_one_year(client):
    response = create(client, expirationType="time", expirationMinutes=525601)
    assert response.status_code == 400
    assert "1 year" in response.json()["detail"]


def test_fractional_max_views_is_floored(client):
    response = create(client, expirationType="views", maxViews=2.7)
    assert response.status_code == 201
    assert response.json()["max_views"] == 2

    response = create(client, expirationType="views", maxViews=0.5)
    assert response.status_code == 400
    assert response.json()["field"] == "maxViews"


def test_blank_content(client):
    response = create(client, content="   ")
    assert response.status_code == 400
    assert response.json()["field"] == "content"


def test_schema_errors_are_422(client):
    assert client.post("/api/pastes", json={}).status_code == 422
    assert create(client, expirationType="forever").status_code == 422
    assert create(client, title="t" * 256).status_code == 422


def test_metadata_omits_content_and_does_not_count(client):
    paste_id = create(client, expirationType="views", maxViews=1).json()["id"]

    for _ in range(2):
        meta = client.get(f"/api/pastes/{paste_id}/meta", headers=HEADERS)
        assert meta.status_code == 200
        assert "content" not in meta.json()
        assert meta.json()["remaining_views"] == 1

    assert client.get(f"/api/pastes/{paste_id}", headers=HEADERS).status_code == 200
    assert client.get(f"/api/pastes/{paste_id}/meta", headers=HEADERS).status_code == 410


def test_not_found(client):
    assert client.get("/api/pastes/nothere1").status_code == 404
    assert client.get("/api/pastes/nothere1/meta").status_code == 404
    assert client.delete("/api/pastes/nothere1").status_code == 404


def test_invalid_paste_id(client):
    assert client.get("/api/pastes/abc").status_code == 400
    assert client.get("/api/pastes/abc-defgh").status_code == 400
    assert client.delete("/api/pastes/" + "a" * 21).status_code == 400


def test_delete_twice(client):
    paste_id = create(client).json()["id"]

    first = client.delete(f"/api/pastes/{paste_id}")
    assert first.status_code == 200
    assert first.json() == {"id": paste_id, "message": "Paste deleted successfully"}

    assert client.delete(f"/api/pastes/{paste_id}").status_code == 404
    assert client.get(f"/api/pastes/{paste_id}").status_code == 404


def test_stats(client):
    create(client)
    create(client, expirationType="time", expirationMinutes=1)

    later = {"x-test-now-ms": to_ms(NOW + timedelta(minutes=5))}
    response = client.get("/api/pastes/stats", headers=later)

    assert response.status_code == 200
    assert response.json() == {"total": 2, "active": 1}


def test_id_exhaustion_is_server_error(client, monkeypatch):
    monkeypatch.setattr(settings, "PASTE_ID_ALPHABET", "ab")
    monkeypatch.setattr(settings, "PASTE_ID_LENGTH", 1)
    monkeypatch.setattr(settings, "PASTE_ID_MAX_RETRIES", 30)

    assert create(client).status_code == 201
    assert create(client).status_code == 201
    response = create(client)

    assert response.status_code == 500
    assert "unique paste ID" in response.json()["detail"]


def test_store_failure_is_503(client, store, monkeypatch):
    from pastebin.exceptions import StoreError

    def broken(paste_id):
        raise StoreError("down")

    monkeypatch.setattr(store, "get", broken)
    assert client.get("/api/pastes/abcdefgh").status_code == 503


@pytest.mark.parametrize("alphabet,length", [("ab-_", 8), (DEFAULT_ALPHABET, 4)])
def test_ids_from_custom_configuration_are_served(client, monkeypatch, alphabet, length):
    monkeypatch.setattr(settings, "PASTE_ID_ALPHABET", alphabet)
    monkeypatch.setattr(settings, "PASTE_ID_LENGTH", length)

    response = create(client)
    assert response.status_code == 201
    paste_id = response.json()["id"]
    assert len(paste_id) == length

    assert client.get(f"/api/pastes/{paste_id}", headers=HEADERS).status_code == 200
    assert client.get(f"/api/pastes/{paste_id}/meta", headers=HEADERS).status_code == 200
    assert client.delete(f"/api/pastes/{paste_id}").status_code == 200


@pytest.mark.parametrize("field,value", [("maxViews", True), ("maxViews", "3"), ("expirationMinutes", "10")])
def test_expiration_numbers_are_not_coerced(client, field, value):
    kind = "views" if field == "maxViews" else "time"
    assert create(client, expirationType=kind, **{field: value}).status_code == 422
