from sqlalchemy.exc import OperationalError

from app import app
from core.dependencies import get_book_manager
from core.exceptions import ForbiddenError


class BrokenBookManager:
    def list_books(self, page, limit, search_term=""):
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))


def test_database_error_is_generic_500(client, admin_headers):
    app.dependency_overrides[get_book_manager] = lambda: BrokenBookManager()

    response = client.get("/api/books", headers=admin_headers)
    body = response.json()

    assert response.status_code == 500
    assert body == {
        "data": None,
        "message": "Something went wrong.",
        "error": "Internal Server Error",
    }


def test_query_validation_is_412(client, admin_headers):
    response = client.get("/api/books", params={"page": 0}, headers=admin_headers)
    assert response.status_code == 412
    assert response.json()["message"].startswith("page")


def test_unknown_route_uses_envelope(client):
    response = client.get("/api/nowhere")
    assert response.status_code == 404
    assert response.json()["data"] is None


def test_health(client):
    assert client.get("/api/health").json() == {"status": "ok"}


def test_domain_error_uses_its_status(client, admin_headers):
    class ForbiddingBookManager:
        def list_books(self, page, limit, search_term=""):
            raise ForbiddenError("Catalogue is closed.")

    app.dependency_overrides[get_book_manager] = lambda: ForbiddingBookManager()

    response = client.get("/api/books", headers=admin_headers)
    assert response.status_code == 403
    assert response.json()["message"] == "Catalogue is closed."
