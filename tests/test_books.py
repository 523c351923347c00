import pytest

from core.exceptions import NotFoundError, PreconditionFailedError, ValidationError
from utils.lending_manager import LendingManager


def _create(client, headers, name, details="A novel."):
    response = client.post("/api/books", json={"name": name, "details": details}, headers=headers)
    assert response.status_code == 200, response.json()
    return response.json()["data"]


def test_book_crud(client, admin_headers):
    book = _create(client, admin_headers, "The Great Gatsby", "Jazz age novel.")
    assert book["slug"] == "the-great-gatsby"
    assert book["status"] == "available"
    assert book["borrower_details"] == {}

    response = client.put(
        f"/api/books/{book['id']}",
        json={"name": "Gatsby Revisited", "details": "Second edition."},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["data"]["slug"] == "gatsby-revisited"

    response = client.get(f"/api/books/{book['id']}", headers=admin_headers)
    assert response.json()["data"]["details"] == "Second edition."

    response = client.delete(f"/api/books/{book['id']}", headers=admin_headers)
    assert response.status_code == 200
    assert client.get(f"/api/books/{book['id']}", headers=admin_headers).status_code == 404


def test_unknown_book(client, admin_headers):
    response = client.get("/api/books/does-not-exist", headers=admin_headers)
    assert response.status_code == 404
    assert response.json()["error"] == "Not Found"


def test_duplicate_book_name(client, admin_headers):
    _create(client, admin_headers, "Dune")
    response = client.post(
        "/api/books", json={"name": "Dune", "details": "Again."}, headers=admin_headers
    )
    assert response.status_code == 412


def test_missing_details(client, admin_headers):
    response = client.post("/api/books", json={"name": "Dune"}, headers=admin_headers)
    assert response.status_code == 412
    assert response.json()["message"].startswith("details")


def test_search_reports_full_total(client, admin_headers):
    for i in range(3):
        _create(client, admin_headers, f"Gatsby Part {i}")
    _create(client, admin_headers, "Moby Dick", "Whale story, nothing like GATSBY.")
    _create(client, admin_headers, "Ulysses")

    response = client.get(
        "/api/books", params={"search_term": "gatsby", "limit": 2}, headers=admin_headers
    )
    data = response.json()["data"]

    assert response.status_code == 200
    assert data["total"] == 4
    assert len(data["books"]) == 2


def test_limit_zero_returns_everything(client, admin_headers):
    for i in range(12):
        _create(client, admin_headers, f"Book {i}")

    data = client.get("/api/books", params={"limit": 0}, headers=admin_headers).json()["data"]
    assert data["total"] == 12
    assert len(data["books"]) == 12

    data = client.get("/api/books", headers=admin_headers).json()["data"]
    assert len(data["books"]) == 10

    data = client.get("/api/books", params={"page": 2}, headers=admin_headers).json()["data"]
    assert len(data["books"]) == 2


def test_search_term_is_literal(client, admin_headers):
    _create(client, admin_headers, "100% Cotton")
    _create(client, admin_headers, "Plain Book")

    data = client.get(
        "/api/books", params={"search_term": "%"}, headers=admin_headers
    ).json()["data"]
    assert data["total"] == 1


def test_listing_cache_is_invalidated_on_write(client, admin_headers, cache):
    _create(client, admin_headers, "Dune")
    assert client.get("/api/books", headers=admin_headers).json()["data"]["total"] == 1
    assert cache.get_stats()["namespaces"]["books"] == 1

    _create(client, admin_headers, "Emma")
    assert client.get("/api/books", headers=admin_headers).json()["data"]["total"] == 2


def test_borrower_details_only_for_admins(client, admin_headers, user_headers):
    book = _create(client, admin_headers, "Dune")
    client.post("/api/borrow-book", json={"book_id": book["id"]}, headers=user_headers)

    admin_view = client.get("/api/books", headers=admin_headers).json()["data"]["books"][0]
    assert admin_view["borrower_details"]["email"] == "alice@example.com"
    assert admin_view["status"] == "unavailable"

    user_view = client.get("/api/books", headers=user_headers).json()["data"]["books"][0]
    assert "borrower_details" not in user_view
    assert user_view["status"] == "unavailable"


def test_user_cannot_create_books(client, user_headers):
    response = client.post(
        "/api/books", json={"name": "Dune", "details": "x"}, headers=user_headers
    )
    assert response.status_code == 403


def test_deleted_name_stays_reserved(books):
    book = books.create_book("Dune", "Desert planet.")
    books.delete_book(book.id)

    with pytest.raises(NotFoundError):
        books.get_book(book.id)
    with pytest.raises(ValidationError):
        books.create_book("Dune", "Reprint.")


def test_cannot_delete_borrowed_book(db, books, make_user):
    user = make_user("Alice")
    book = books.create_book("Dune", "Desert planet.")
    LendingManager(db, books).borrow(book.id, user)

    with pytest.raises(PreconditionFailedError):
        books.delete_book(book.id)
    assert books.get_book(book.id).deleted_at is None


def test_search_folds_non_ascii_case(books):
    books.create_book("Ångström Physics", "Notes")
    books.create_book("Élan Vital", "Essai sur l'ÉVOLUTION créatrice.")
    books.create_book("Plain Book", "Nothing special.")

    assert books.list_books(1, 10, "ångström")["total"] == 1
    assert books.list_books(1, 10, "ÅNGSTRÖM")["total"] == 1
    # Matches in details as well as name
    assert books.list_books(1, 10, "évolution")["total"] == 1
