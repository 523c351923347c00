"""Role and permission management routes."""

from fastapi import APIRouter

from core.dependencies import (
    AuthorizerDep,
    CurrentUserDep,
    PaginationDep,
    PermissionManagerDep,
    RoleManagerDep,
)
from core.responses import forbidden, success
from schemas.role import RoleRequest
from utils.converters import model_to_permission, model_to_role

router = APIRouter(prefix="/api", tags=["Role"])


@router.get("/permissions", summary="List permissions")
def list_permissions(
    current_user: CurrentUserDep,
    authorizer: AuthorizerDep,
    permission_manager: PermissionManagerDep,
):
    if not authorizer.authorize(current_user, "view-role"):
        return forbidden()
    permissions = [model_to_permission(p) for p in permission_manager.list_permissions()]
    return success("Permissions get sucessfully.", {"permissions": permissions})


@router.get("/roles", summary="List roles")
def list_roles(
    pagination: PaginationDep,
    current_user: CurrentUserDep,
    authorizer: AuthorizerDep,
    role_manager: RoleManagerDep,
):
    """List roles with their permission slugs.

    Args:
        pagination: page and limit; search_term is ignored.
        current_user: Current authenticated user.
        authorizer: Injected Authorizer.
        role_manager: Injected RoleManager instance.

    Returns:
        Envelope with "roles" and "total".
    """
    if not authorizer.authorize(current_user, "view-role"):
        return forbidden()
    roles, total = role_manager.list_roles(pagination.page, pagination.limit)
    return success(
        "Roles get sucessfully.",
        {"roles": [model_to_role(r) for r in roles], "total": total},
    )


@router.post("/roles", summary="Create a role")
def create_role(
    req: RoleRequest,
    current_user: CurrentUserDep,
    authorizer: AuthorizerDep,
    role_manager: RoleManagerDep,
):
    if not authorizer.authorize(current_user, "create-role"):
        return forbidden()
    role = role_manager.create_role(req.name, req.permissions)
    return success("Role created sucessfully", model_to_role(role))


@router.get("/roles/{role_id}", summary="Show a role")
def show_role(
    role_id: str,
    current_user: CurrentUserDep,
    authorizer: AuthorizerDep,
    role_manager: RoleManagerDep,
):
    if not authorizer.authorize(current_user, "view-role"):
        return forbidden()
    role = role_manager.get_role(role_id)
    return success("Role details fetch sucessfully", model_to_role(role))


@router.put("/roles/{role_id}", summary="Update a role")
def update_role(
    role_id: str,
    req: RoleRequest,
    current_user: CurrentUserDep,
    authorizer: AuthorizerDep,
    role_manager: RoleManagerDep,
):
    """Rename a role; its slug is regenerated from the new name.

    When ``permissions`` is given it replaces the role's permission set.
    """
    if not authorizer.authorize(current_user, "edit-role"):
        return forbidden()
    role = role_manager.update_role(role_id, req.name, req.permissions)
    return success("Role updated sucessfully", model_to_role(role))


@router.delete("/roles/{role_id}", summary="Delete a role")
def delete_role(
    role_id: str,
    current_user: CurrentUserDep,
    authorizer: AuthorizerDep,
    role_manager: RoleManagerDep,
):
    """Delete a role.

    Raises:
        NotFoundError: If the role does not exist.
        PreconditionFailedError: If users still have the role.
    """
    if not authorizer.authorize(current_user, "delete-role"):
        return forbidden()
    role_manager.delete_role(role_id)
    return success("Role deleted sucessfully")
