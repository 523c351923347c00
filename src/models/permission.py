"""Permission database models.

This module defines the Permission model and the RolePermission join entity
using SQLAlchemy.
"""

import uuid

from sqlalchemy import Column, ForeignKey, String, UniqueConstraint

from .base import Base


class PermissionModel(Base):
    """Permission database model."""

    __tablename__ = "permissions"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    slug = Column(String, unique=True, index=True, nullable=False)  # e.g. 'edit-book'


class RolePermissionModel(Base):
    """Grant of one permission to one role."""

    __tablename__ = "role_permissions"
    __table_args__ = (
        UniqueConstraint("role_id", "permission_id", name="uq_role_permissions_role_permission"),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    role_id = Column(
        String, ForeignKey("roles.id", ondelete="CASCADE"), index=True, nullable=False
    )
    permission_id = Column(
        String, ForeignKey("permissions.id", ondelete="CASCADE"), index=True, nullable=False
    )
