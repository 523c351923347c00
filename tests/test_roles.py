import pytest

from core.exceptions import NotFoundError, PreconditionFailedError, ValidationError
from utils.role_manager import RoleManager


def test_role_crud_flow(client, admin_headers):
    response = client.post("/api/roles", json={"name": "Editor"}, headers=admin_headers)
    assert response.status_code == 200
    role = response.json()["data"]
    assert role["slug"] == "editor"
    assert role["permissions"] == []

    response = client.put(
        f"/api/roles/{role['id']}",
        json={"name": "Senior Editor", "permissions": ["view-book", "edit-book"]},
        headers=admin_headers,
    )
    assert response.status_code == 200
    updated = response.json()["data"]
    assert updated["slug"] == "senior-editor"
    assert sorted(updated["permissions"]) == ["edit-book", "view-book"]

    response = client.get(f"/api/roles/{role['id']}", headers=admin_headers)
    assert response.json()["data"]["name"] == "Senior Editor"

    response = client.delete(f"/api/roles/{role['id']}", headers=admin_headers)
    assert response.status_code == 200
    response = client.get(f"/api/roles/{role['id']}", headers=admin_headers)
    assert response.status_code == 404


def test_list_roles(client, admin_headers):
    response = client.get("/api/roles", headers=admin_headers)
    data = response.json()["data"]

    assert response.status_code == 200
    assert data["total"] == 2
    assert [r["slug"] for r in data["roles"]] == ["admin", "user"]


def test_list_permissions(client, admin_headers):
    response = client.get("/api/permissions", headers=admin_headers)
    slugs = [p["slug"] for p in response.json()["data"]["permissions"]]
    assert len(slugs) == 10
    assert "borrow-book" in slugs


def test_duplicate_role_name(client, admin_headers):
    response = client.post("/api/roles", json={"name": "admin"}, headers=admin_headers)
    assert response.status_code == 412


def test_unknown_permission_slug(client, admin_headers):
    response = client.post(
        "/api/roles",
        json={"name": "Auditor", "permissions": ["fly"]},
        headers=admin_headers,
    )
    assert response.status_code == 412


def test_delete_role_in_use(client, admin_headers, db):
    user_role = RoleManager(db).get_role_by_slug("user")
    client.post(
        "/api/user/register",
        json={"name": "Alice", "email": "alice@example.com", "password": "secret123"},
    )
    response = client.delete(f"/api/roles/{user_role.id}", headers=admin_headers)
    assert response.status_code == 412


def test_regular_user_cannot_manage_roles(client, user_headers):
    for response in (
        client.get("/api/roles", headers=user_headers),
        client.post("/api/roles", json={"name": "Hacker"}, headers=user_headers),
        client.get("/api/permissions", headers=user_headers),
    ):
        assert response.status_code == 403
        assert response.json()["message"] == "You don't have authority to access this route."


def test_old_slug_stops_resolving_after_rename(db):
    roles = RoleManager(db)
    role = roles.create_role("Editor")
    roles.update_role(role.id, "Senior Editor")

    assert roles.get_role_by_slug("editor") is None
    assert roles.get_role_by_slug("senior-editor").id == role.id


def test_delete_role_removes_grants(db):
    roles = RoleManager(db)
    role = roles.create_role("Auditor", ["view-book", "view-role"])
    roles.delete_role(role.id)

    with pytest.raises(NotFoundError):
        roles.get_role(role.id)
    # Name becomes available again
    assert roles.create_role("Auditor").slug == "auditor"


def test_delete_role_with_users(db, make_user):
    make_user("Alice")
    roles = RoleManager(db)
    with pytest.raises(PreconditionFailedError):
        roles.delete_role(roles.get_role_by_slug("user").id)


def test_role_name_without_letters(db):
    with pytest.raises(ValidationError):
        RoleManager(db).create_role("!!!")
