"""Role and permission schema definitions."""

from typing import List, Optional

from pydantic import BaseModel, Field


class PermissionInfo(BaseModel):
    id: str
    name: str
    slug: str


class RoleRequest(BaseModel):
    """Body of role create and update requests."""

    name: str = Field(min_length=1, max_length=255)
    permissions: Optional[List[str]] = Field(
        default=None,
        description="Permission slugs granted to the role. Omit to keep the current set.",
    )


class RoleInfo(BaseModel):
    id: str
    name: str
    slug: str
    permissions: List[str] = Field(default_factory=list)
