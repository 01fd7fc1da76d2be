"""
Tests for the HTTP routes, using Flask's test client.
"""

import io

import pytest

from bookshelf.config import AppConfig
from bookshelf.main import create_app
from bookshelf.store.documents import SqlDocumentStore

from conftest import DUNE


@pytest.fixture
def app(db, tmp_path, catalog):
    config = AppConfig(
        blob_dir=str(tmp_path / "blobs"),
        blob_base_url="http://localhost/media",
        secret_key="test",
    )
    app = create_app(config, catalog=catalog, store=SqlDocumentStore())
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def signed_in(client):
    response = client.post("/api/auth/signup", json={"email": "reader@example.com", "password": "secret1"})
    assert response.status_code == 201
    return client


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json()["status"] == "ok"


def test_auth_state_roundtrip(client):
    assert client.get("/api/auth/state").get_json()["logged_in"] is False

    client.post("/api/auth/signup", json={"email": "reader@example.com", "password": "secret1"})
    assert client.get("/api/auth/state").get_json()["logged_in"] is True

    client.post("/api/auth/signout")
    assert client.get("/api/auth/state").get_json()["logged_in"] is False

    response = client.post("/api/auth/signin", json={"email": "reader@example.com", "password": "nope"})
    assert response.status_code == 401
    assert response.get_json()["status"] == "error"


def test_search_records_history(signed_in):
    response = signed_in.get("/api/books/search?q=dune")

    body = response.get_json()
    assert body["status"] == "success"
    assert body["data"][0]["key"] == DUNE.key

    history = signed_in.get("/api/books/history").get_json()
    assert [entry["query"] for entry in history["data"]] == ["dune"]


def test_blank_search_is_initial(signed_in):
    body = signed_in.get("/api/books/search?q=").get_json()
    assert body["status"] == "initial"
    assert signed_in.get("/api/books/history").get_json()["status"] == "empty"


def test_toggle_and_list_favorites(signed_in):
    signed_in.get("/api/books/search?q=dune")

    response = signed_in.post("/api/books/favorites/toggle", json=DUNE.to_dict())

    assert response.status_code == 200
    favorites = signed_in.get("/api/books/favorites").get_json()
    assert [book["key"] for book in favorites["data"]] == [DUNE.key]
    assert favorites["data"][0]["isFavorite"] is True


def test_toggle_signed_out_fails(client):
    response = client.post("/api/books/favorites/toggle", json=DUNE.to_dict())
    assert response.status_code == 400
    assert response.get_json()["success"] is False


def test_notes_and_reading_state(signed_in):
    response = signed_in.put("/api/books/notes", json={"key": DUNE.key, "notes": "Fear is the mind-killer"})
    assert response.status_code == 200

    notes = signed_in.get("/api/books/notes", query_string={"key": DUNE.key}).get_json()
    assert notes["notes"] == "Fear is the mind-killer"

    assert signed_in.get("/api/books/reading-state", query_string={"key": DUNE.key}).get_json()["state"] == "NotStarted"
    response = signed_in.put("/api/books/reading-state", json={"key": DUNE.key, "state": "Finished"})
    assert response.get_json()["state"] == "Finished"

    bad = signed_in.put("/api/books/reading-state", json={"key": DUNE.key, "state": "Skimmed"})
    assert bad.status_code == 400


def test_history_delete_and_clear(signed_in):
    signed_in.get("/api/books/search?q=dune")
    signed_in.get("/api/books/search?q=emma")
    history = signed_in.get("/api/books/history").get_json()["data"]
    emma = next(entry for entry in history if entry["query"] == "emma")

    response = signed_in.delete(f"/api/books/history/{emma['id']}")
    assert [entry["query"] for entry in response.get_json()["history"]["data"]] == ["dune"]

    response = signed_in.delete("/api/books/history")
    assert response.get_json()["history"]["status"] == "empty"


def test_profile_update_with_image(signed_in):
    assert signed_in.get("/api/profile").get_json()["status"] == "not_found"

    response = signed_in.put(
        "/api/profile",
        data={
            "firstName": "Ada",
            "lastName": "Lovelace",
            "birthDate": "1815-12-10",
            "image": (io.BytesIO(b"\xff\xd8picture"), "me.jpg"),
        },
        content_type="multipart/form-data",
    )

    body = response.get_json()
    assert response.status_code == 200
    assert body["update"]["status"] == "success"
    picture_url = body["profile"]["data"]["profilePictureUrl"]
    assert picture_url.startswith("http://localhost/media/profile_pictures/")

    media = signed_in.get(picture_url.replace("http://localhost", ""))
    assert media.status_code == 200
    assert media.data == b"\xff\xd8picture"
    media.close()


def test_profile_validation_error(signed_in):
    response = signed_in.put("/api/profile", json={"firstName": "", "lastName": "Lovelace"})
    assert response.status_code == 400
    assert response.get_json()["update"]["message"] == "First name and last name are required"


@pytest.mark.parametrize("path", ["/api/books/notes", "/api/books/reading-state"])
def test_array_body_is_rejected(signed_in, path):
    response = signed_in.put(path, json=[{"key": DUNE.key}])
    assert response.status_code == 400
    assert response.get_json()["error"] == "request body must be a JSON object"


def test_array_body_on_toggle_is_rejected(signed_in):
    response = signed_in.post("/api/books/favorites/toggle", json=[DUNE.to_dict()])
    assert response.status_code == 400


def test_array_body_on_profile_is_rejected(signed_in):
    response = signed_in.put("/api/profile", json=["Ada", "Lovelace"])
    assert response.status_code == 400


@pytest.mark.parametrize("birth_date", [18151210, "10/12/1815"])
def test_profile_birth_date_must_be_iso_text(signed_in, birth_date):
    response = signed_in.put(
        "/api/profile",
        json={"firstName": "Ada", "lastName": "Lovelace", "birthDate": birth_date},
    )
    assert response.status_code == 400
    assert "birthDate" in response.get_json()["error"]


def test_array_body_on_sign_in_is_a_failed_sign_in(client):
    response = client.post("/api/auth/signin", json=["ada@example.com", "secret"])
    assert response.status_code == 401
