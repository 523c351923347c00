"""Permission checks.

``Authorizer.authorize`` answers whether a user's role grants a permission.
Routes call it first thing and answer 403 on a deny.
"""

import enum
import logging
from typing import Optional

from sqlalchemy.orm import Session

from models.permission import PermissionModel, RolePermissionModel
from models.user import UserModel

logger = logging.getLogger(__name__)


class AccessDecision(enum.Enum):
    ALLOW = "allow"
    DENY = "deny"

    def __bool__(self) -> bool:
        return self is AccessDecision.ALLOW


class Authorizer:
    """Decides allow/deny for a (user, permission slug) pair."""

    def __init__(self, db: Session):
        self.db = db

    def authorize(self, user: Optional[UserModel], permission_slug: str) -> AccessDecision:
        """Check whether ``user``'s role grants ``permission_slug``.

        The check runs against the database on every call.

        Args:
            user: The authenticated user, or None.
            permission_slug: Slug of the required permission, e.g. "edit-book".

        Returns:
            AccessDecision.ALLOW or AccessDecision.DENY.
        """
        if user is None or user.role_id is None:
            return AccessDecision.DENY

        granted = self.db.query(
            self.db.query(RolePermissionModel)
            .join(PermissionModel, PermissionModel.id == RolePermissionModel.permission_id)
            .filter(
                RolePermissionModel.role_id == user.role_id,
                PermissionModel.slug == permission_slug,
            )
            .exists()
        ).scalar()

        if not granted:
            logger.info("Denied %s to user %s", permission_slug, user.id)
            return AccessDecision.DENY
        return AccessDecision.ALLOW
