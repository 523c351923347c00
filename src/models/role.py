"""Role database model."""

import uuid

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from .base import Base


class RoleModel(Base):
    """Role database model."""

    __tablename__ = "roles"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, unique=True, nullable=False)
    slug = Column(String, unique=True, index=True, nullable=False)

    permissions = relationship(
        "PermissionModel",
        secondary="role_permissions",
        order_by="PermissionModel.slug",
    )
    users = relationship("UserModel", back_populates="role")
