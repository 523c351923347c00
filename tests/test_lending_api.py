import pytest


@pytest.fixture
def book_id(client, admin_headers):
    response = client.post(
        "/api/books",
        json={"name": "The Great Gatsby", "details": "Jazz age novel."},
        headers=admin_headers,
    )
    return response.json()["data"]["id"]


def _borrowed_list(client, headers, **params):
    response = client.get("/api/get-borrowed-list", params=params, headers=headers)
    assert response.status_code == 200
    return response.json()["data"]


def test_borrow_and_return_flow(client, book_id, user_headers, transport):
    response = client.post("/api/borrow-book", json={"book_id": book_id}, headers=user_headers)
    assert response.status_code == 200
    assert response.json()["message"] == "Book borrow sucessfully"
    # Background tasks run before TestClient returns
    assert len(transport.sent) == 1

    data = _borrowed_list(client, user_headers)
    assert data["total"] == 1
    entry = data["borrowing_history"][0]
    assert entry["status"] == "Borrowed"
    assert entry["return_date"] is None
    assert entry["book"]["title"] == "The Great Gatsby"
    assert entry["book"]["current_status"] == "Not available"

    response = client.post(
        "/api/return-book",
        json={"borrow_id": entry["id"], "book_id": book_id},
        headers=user_headers,
    )
    assert response.status_code == 200
    assert response.json()["message"] == "Book return sucessfully."

    entry = _borrowed_list(client, user_headers)["borrowing_history"][0]
    assert entry["status"] == "Returned"
    assert entry["return_date"] is not None
    assert entry["book"]["current_status"] == "Available"

    response = client.post(
        "/api/return-book",
        json={"borrow_id": entry["id"], "book_id": book_id},
        headers=user_headers,
    )
    assert response.status_code == 400


def test_second_borrower_is_refused(client, book_id, user_headers, register, login):
    client.post("/api/borrow-book", json={"book_id": book_id}, headers=user_headers)
    register("Bob", "bob@example.com")
    bob_headers = login("bob@example.com")

    response = client.post("/api/borrow-book", json={"book_id": book_id}, headers=bob_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "Bad Request"


def test_borrow_unknown_book(client, user_headers):
    response = client.post("/api/borrow-book", json={"book_id": "missing"}, headers=user_headers)
    assert response.status_code == 404


def test_admin_cannot_borrow(client, book_id, admin_headers):
    response = client.post("/api/borrow-book", json={"book_id": book_id}, headers=admin_headers)
    assert response.status_code == 403


def test_borrowed_list_search(client, admin_headers, user_headers):
    for name in ("Dune", "Dune Messiah", "Emma"):
        book = client.post(
            "/api/books", json={"name": name, "details": "x"}, headers=admin_headers
        ).json()["data"]
        client.post("/api/borrow-book", json={"book_id": book["id"]}, headers=user_headers)

    data = _borrowed_list(client, user_headers, search_term="dune", limit=1)
    assert data["total"] == 2
    assert len(data["borrowing_history"]) == 1


def test_bookwise_borrow_list(client, book_id, admin_headers, user_headers, register, login):
    response = client.post(
        "/api/borrow-book", json={"book_id": book_id}, headers=user_headers
    )
    entry = _borrowed_list(client, user_headers)["borrowing_history"][0]
    client.post(
        "/api/return-book",
        json={"borrow_id": entry["id"], "book_id": book_id},
        headers=user_headers,
    )
    register("Bob", "bob@example.com")
    bob_headers = login("bob@example.com")
    client.post("/api/borrow-book", json={"book_id": book_id}, headers=bob_headers)

    response = client.get(f"/api/get-bookwise-borrow-list/{book_id}", headers=admin_headers)
    data = response.json()["data"]
    assert response.status_code == 200
    assert data["total"] == 2
    emails = {e["user_details"]["email"] for e in data["borrowing_history"]}
    assert emails == {"alice@example.com", "bob@example.com"}

    response = client.get(
        f"/api/get-bookwise-borrow-list/{book_id}",
        params={"search_term": "BOB@"},
        headers=admin_headers,
    )
    data = response.json()["data"]
    assert data["total"] == 1
    assert data["borrowing_history"][0]["status"] == "Borrowed"


def test_bookwise_list_requires_catalogue_rights(client, book_id, user_headers):
    response = client.get(f"/api/get-bookwise-borrow-list/{book_id}", headers=user_headers)
    assert response.status_code == 403


def test_bookwise_list_unknown_book(client, admin_headers):
    response = client.get("/api/get-bookwise-borrow-list/missing", headers=admin_headers)
    assert response.status_code == 404


def test_bookwise_search_folds_non_ascii_case(client, admin_headers, book_id, register, login):
    register("Zoë", "zoe@example.com")
    zoe_headers = login("zoe@example.com")
    client.post("/api/borrow-book", json={"book_id": book_id}, headers=zoe_headers)

    response = client.get(
        f"/api/get-bookwise-borrow-list/{book_id}",
        params={"search_term": "ZOË"},
        headers=admin_headers,
    )
    assert response.json()["data"]["total"] == 1
