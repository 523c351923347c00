"""Role management utilities."""

import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session, selectinload

from core.exceptions import NotFoundError, PreconditionFailedError, ValidationError
from models.role import RoleModel
from utils.pagination import paginate
from utils.permission_manager import PermissionManager
from utils.slug import slugify
from utils.user_manager import UserManager

logger = logging.getLogger(__name__)

ROLE_NOT_FOUND_MESSAGE = "No any role found with this id, please try again with valid id."


class RoleManager:
    """Manages role CRUD and permission assignment."""

    def __init__(self, db: Session):
        """Initialize RoleManager.

        Args:
            db: SQLAlchemy Session.
        """
        self.db = db
        self.permissions = PermissionManager(db)

    def list_roles(self, page: int, limit: int) -> Tuple[List[RoleModel], int]:
        query = (
            self.db.query(RoleModel)
            .options(selectinload(RoleModel.permissions))
            .order_by(RoleModel.name)
        )
        return paginate(query, page, limit)

    def get_role(self, role_id: str) -> RoleModel:
        role = self.db.query(RoleModel).filter(RoleModel.id == role_id).first()
        if role is None:
            raise NotFoundError(ROLE_NOT_FOUND_MESSAGE)
        return role

    def get_role_by_slug(self, slug: str) -> Optional[RoleModel]:
        return self.db.query(RoleModel).filter(RoleModel.slug == slug).first()

    def _check_name(self, name: str, exclude_id: Optional[str] = None) -> str:
        """Validate a role name and return its slug.

        Raises:
            ValidationError: If the name is taken or yields an empty slug.
        """
        slug = slugify(name)
        if not slug:
            raise ValidationError("The name must contain at least one letter or digit.")

        query = self.db.query(RoleModel).filter(
            (RoleModel.name == name) | (RoleModel.slug == slug)
        )
        if exclude_id is not None:
            query = query.filter(RoleModel.id != exclude_id)
        if query.first() is not None:
            raise ValidationError("The name has already been taken.")
        return slug

    def create_role(self, name: str, permission_slugs: Optional[List[str]] = None) -> RoleModel:
        """Create a role.

        Args:
            name: Unique display name; the slug is derived from it.
            permission_slugs: Optional permissions to grant.

        Returns:
            The created RoleModel.

        Raises:
            ValidationError: If the name is taken or a permission slug is unknown.
        """
        name = name.strip()
        slug = self._check_name(name)
        role = RoleModel(name=name, slug=slug)
        if permission_slugs is not None:
            role.permissions = self.permissions.get_permissions_by_slugs(permission_slugs)

        self.db.add(role)
        self.db.commit()
        self.db.refresh(role)
        logger.info("Created role %s (%s)", role.slug, role.id)
        return role

    def update_role(
        self, role_id: str, name: str, permission_slugs: Optional[List[str]] = None
    ) -> RoleModel:
        """Rename a role and optionally replace its permissions.

        The slug is regenerated from the new name, so the old slug stops
        resolving.

        Raises:
            NotFoundError: If the role does not exist.
            ValidationError: If the name is taken or a permission slug is unknown.
        """
        role = self.get_role(role_id)
        name = name.strip()
        slug = self._check_name(name, exclude_id=role.id)

        role.name = name
        role.slug = slug
        if permission_slugs is not None:
            role.permissions = self.permissions.get_permissions_by_slugs(permission_slugs)

        self.db.commit()
        self.db.refresh(role)
        logger.info("Updated role %s (%s)", role.slug, role.id)
        return role

    def delete_role(self, role_id: str) -> None:
        """Delete a role and its permission grants.

        Raises:
            NotFoundError: If the role does not exist.
            PreconditionFailedError: If any user still has the role.
        """
        role = self.get_role(role_id)
        user_count = UserManager(self.db).count_users_with_role(role.id)
        if user_count > 0:
            raise PreconditionFailedError(
                "One or more users are associated with this role, "
                "Please first delete this users & come again."
            )

        # Deleting through the ORM also removes the role_permissions rows
        self.db.delete(role)
        self.db.commit()
        logger.info("Deleted role %s", role_id)
