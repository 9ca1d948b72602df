"""
Tests for the FastAPI application.
"""

import json
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from api.main import app, get_catalog
from catalog.errors import StorageUnavailableError


@pytest.fixture
def client(catalog):
    """Create test client bound to a catalog in a temporary directory."""
    app.dependency_overrides[get_catalog] = lambda: catalog
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def broken_client():
    """Create test client whose catalog cannot reach its data file."""
    failing = AsyncMock()
    error = StorageUnavailableError("Cannot read books.json: permission denied", "books.json")
    for method in ("list_books", "list_available", "get_book", "create_book", "update_book", "delete_book"):
        getattr(failing, method).side_effect = error
    app.dependency_overrides[get_catalog] = lambda: failing
    yield TestClient(app)
    app.dependency_overrides.clear()


def create(client, title="Dune", author="Herbert", available=True):
    response = client.post("/books", json={"title": title, "author": author, "available": available})
    assert response.status_code == 201
    return response.json()


def test_welcome_page(client):
    """Test the welcome page lists the endpoints."""
    response = client.get("/")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "GET /books/available" in response.text


def test_health_check(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["storage_status"] == "healthy"
    assert data["books_count"] == 0
    assert data["timestamp"].endswith("Z")
    assert "version" in data


def test_health_check_reports_corrupt_file(client, write_data_file):
    write_data_file("{broken")

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "unhealthy"


def test_list_books_empty(client, data_file):
    response = client.get("/books")
    assert response.status_code == 200
    assert response.json() == []
    assert data_file.exists()


def test_create_book(client, data_file):
    response = client.post("/books", json={"title": "Dune", "author": "Herbert", "available": True})

    assert response.status_code == 201
    assert response.json() == {"id": 1, "title": "Dune", "author": "Herbert", "available": True}
    assert json.loads(data_file.read_text(encoding="utf-8")) == [response.json()]


@pytest.mark.parametrize("payload", [
    {"title": "", "author": "Herbert", "available": True},
    {"title": "Dune", "available": True},
    {"title": "Dune", "author": "Herbert", "available": "true"},
    {"title": 123, "author": True, "available": "not-a-bool"},
    {"id": 9, "title": "Dune", "author": "Herbert", "available": True},
])
def test_create_invalid_book(client, payload):
    response = client.post("/books", json=payload)

    assert response.status_code == 400
    data = response.json()
    assert data["error"] == "Invalid book data"
    assert data["status_code"] == 400
    assert client.get("/books").json() == []


def test_create_malformed_json(client):
    response = client.post(
        "/books",
        content="{not json",
        headers={"Content-Type": "application/json"}
    )
    assert response.status_code == 400


def test_get_book(client):
    created = create(client)

    response = client.get(f"/books/{created['id']}")

    assert response.status_code == 200
    assert response.json() == created


def test_get_nonexistent_book(client):
    response = client.get("/books/9999")
    assert response.status_code == 404
    assert response.json()["error"] == "Book not found"


def test_get_book_non_integer_id(client):
    response = client.get("/books/abc")
    assert response.status_code == 400


def test_available_route_not_shadowed_by_id_route(client):
    create(client, "Dune", "Herbert", True)
    create(client, "Hyperion", "Simmons", False)

    response = client.get("/books/available")

    assert response.status_code == 200
    assert [book["title"] for book in response.json()] == ["Dune"]


def test_update_book_partial(client):
    create(client, "Dune", "Herbert", True)
    create(client, "Hyperion", "Simmons", False)

    response = client.put("/books/2", json={"available": True})

    assert response.status_code == 200
    assert response.json() == {"id": 2, "title": "Hyperion", "author": "Simmons", "available": True}


def test_patch_method_alias(client):
    create(client)

    response = client.patch("/books/1", json={"title": "Dune Messiah"})

    assert response.status_code == 200
    assert response.json()["title"] == "Dune Messiah"
    assert response.json()["author"] == "Herbert"


def test_update_with_empty_body_is_noop(client):
    created = create(client)

    response = client.put("/books/1", json={})

    assert response.status_code == 200
    assert response.json() == created


def test_update_cannot_change_id(client):
    create(client)

    response = client.put("/books/1", json={"id": 5})

    assert response.status_code == 400
    assert client.get("/books/1").status_code == 200


def test_update_rejects_unknown_fields(client):
    create(client)

    response = client.put("/books/1", json={"year": 1965})

    assert response.status_code == 400


def test_update_nonexistent_book(client):
    response = client.put("/books/42", json={"available": False})
    assert response.status_code == 404
    assert response.json()["error"] == "Book not found"


def test_delete_book(client):
    create(client, "Dune", "Herbert", True)
    create(client, "Hyperion", "Simmons", False)

    response = client.delete("/books/1")

    assert response.status_code == 200
    assert response.json() == {"message": "Book deleted successfully"}
    assert [book["id"] for book in client.get("/books").json()] == [2]
    assert client.get("/books/1").status_code == 404


def test_delete_nonexistent_book(client):
    response = client.delete("/books/99999")
    assert response.status_code == 404


def test_ids_keep_increasing_after_delete(client):
    create(client, "A", "X")
    create(client, "B", "Y")
    client.delete("/books/1")

    assert create(client, "C", "Z")["id"] == 3


@pytest.mark.parametrize("method, path, kwargs, message", [
    ("get", "/books", {}, "Failed to fetch books"),
    ("get", "/books/available", {}, "Failed to fetch available books"),
    ("get", "/books/1", {}, "Failed to fetch book"),
    ("post", "/books", {"json": {"title": "Dune", "author": "Herbert", "available": True}}, "Failed to add book"),
    ("put", "/books/1", {"json": {"available": False}}, "Failed to update book"),
    ("delete", "/books/1", {}, "Failed to delete book"),
])
def test_storage_failures_return_500(broken_client, method, path, kwargs, message):
    response = getattr(broken_client, method)(path, **kwargs)

    assert response.status_code == 500
    data = response.json()
    assert data["error"] == message
    assert data["status_code"] == 500


def test_corrupt_data_file_is_not_emptied(client, write_data_file):
    path = write_data_file("[{]")

    response = client.post("/books", json={"title": "Dune", "author": "Herbert", "available": True})

    assert response.status_code == 500
    assert path.read_text(encoding="utf-8") == "[{]"


def test_invalid_book_detail_hidden_without_debug(client, monkeypatch):
    monkeypatch.setattr("api.main.api_config.debug", False)

    response = client.post("/books", json={"title": 1})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid book data", "detail": None, "status_code": 400}


def test_invalid_book_detail_shown_in_debug(client, monkeypatch):
    monkeypatch.setattr("api.main.api_config.debug", True)

    response = client.post("/books", json={"title": 1})

    assert response.status_code == 400
    detail = response.json()["detail"]
    assert "body.title" in detail
    assert "body.author" in detail


def test_storage_failure_detail_hidden_without_debug(broken_client, monkeypatch):
    monkeypatch.setattr("api.main.api_config.debug", False)

    response = broken_client.get("/books")

    assert response.status_code == 500
    assert response.json()["detail"] is None


def test_storage_failure_detail_shown_in_debug(broken_client, monkeypatch):
    monkeypatch.setattr("api.main.api_config.debug", True)

    response = broken_client.delete("/books/1")

    assert response.status_code == 500
    data = response.json()
    assert data["error"] == "Failed to delete book"
    assert data["detail"] == "Cannot read books.json: permission denied"


def test_not_found_has_no_detail_in_debug(client, monkeypatch):
    monkeypatch.setattr("api.main.api_config.debug", True)

    response = client.get("/books/9999")

    assert response.status_code == 404
    assert response.json()["detail"] is None


def test_update_operation_ids_are_unique(client):
    response = client.get("/openapi.json")

    assert response.status_code == 200
    item = response.json()["paths"]["/books/{book_id}"]
    assert item["put"]["operationId"] != item["patch"]["operationId"]

    operation_ids = [
        operation["operationId"]
        for path in response.json()["paths"].values()
        for operation in path.values()
    ]
    assert len(operation_ids) == len(set(operation_ids))
