"""Permission catalogue and default role seeding."""

import logging
from typing import Dict, Iterable, List

from sqlalchemy.orm import Session

from core.exceptions import ValidationError
from models.permission import PermissionModel, RolePermissionModel
from models.role import RoleModel

logger = logging.getLogger(__name__)

DEFAULT_PERMISSIONS: List[Dict[str, str]] = [
    {"name": "Create Role", "slug": "create-role"},
    {"name": "Update Role", "slug": "edit-role"},
    {"name": "View Role", "slug": "view-role"},
    {"name": "Delete Role", "slug": "delete-role"},
    {"name": "Create Book", "slug": "create-book"},
    {"name": "Edit Book", "slug": "edit-book"},
    {"name": "Delete Book", "slug": "delete-book"},
    {"name": "View Book", "slug": "view-book"},
    {"name": "Borrow Book", "slug": "borrow-book"},
    {"name": "Return Book", "slug": "return-book"},
]

DEFAULT_ROLES: List[Dict[str, str]] = [
    {"name": "Admin", "slug": "admin"},
    {"name": "User", "slug": "user"},
]

# Admins manage the catalogue but do not borrow
ADMIN_EXCLUDED_PERMISSIONS = {"borrow-book", "return-book"}
USER_PERMISSIONS = {"view-book", "borrow-book", "return-book"}


class PermissionManager:
    """Reads the permission catalogue and seeds reference data."""

    def __init__(self, db: Session):
        self.db = db

    def list_permissions(self) -> List[PermissionModel]:
        return self.db.query(PermissionModel).order_by(PermissionModel.slug).all()

    def get_permissions_by_slugs(self, slugs: Iterable[str]) -> List[PermissionModel]:
        """Resolve permission slugs.

        Args:
            slugs: Permission slugs to resolve.

        Returns:
            The matching permissions.

        Raises:
            ValidationError: If any slug is unknown.
        """
        wanted = set(slugs)
        if not wanted:
            return []
        found = self.db.query(PermissionModel).filter(PermissionModel.slug.in_(wanted)).all()
        missing = wanted - {p.slug for p in found}
        if missing:
            raise ValidationError(
                f"The selected permissions are invalid: {', '.join(sorted(missing))}."
            )
        return found

    def seed_defaults(self) -> None:
        """Create the default permissions and roles if missing.

        Safe to call on every startup; existing rows are left untouched.
        """
        permissions = {p.slug: p for p in self.db.query(PermissionModel).all()}
        for default in DEFAULT_PERMISSIONS:
            if default["slug"] not in permissions:
                model = PermissionModel(name=default["name"], slug=default["slug"])
                self.db.add(model)
                permissions[default["slug"]] = model

        created_roles = []
        for default in DEFAULT_ROLES:
            role = self.db.query(RoleModel).filter(RoleModel.slug == default["slug"]).first()
            if role is None:
                role = RoleModel(name=default["name"], slug=default["slug"])
                self.db.add(role)
                created_roles.append(role)
        self.db.flush()

        # Only freshly created roles get default grants so that later
        # edits made through the API survive a restart
        for role in created_roles:
            if role.slug == "admin":
                slugs = set(permissions) - ADMIN_EXCLUDED_PERMISSIONS
            else:
                slugs = USER_PERMISSIONS
            for slug in sorted(slugs):
                self.db.add(
                    RolePermissionModel(role_id=role.id, permission_id=permissions[slug].id)
                )

        self.db.commit()
        if created_roles:
            logger.info("Seeded roles: %s", ", ".join(r.slug for r in created_roles))
