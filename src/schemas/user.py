"""User and authentication schema definitions."""

from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class RegisterRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255, description="Display name.")
    email: EmailStr = Field(max_length=255, description="Unique email address.")
    password: str = Field(min_length=6, description="Plain text password.")
    role: str = Field(default="user", description="Slug of the role to register under.")


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class UserSummary(BaseModel):
    """Public view of a user; never carries the password hash."""

    id: str
    name: str
    email: str
    role: Optional[str] = Field(default=None, description="Name of the user's role.")


class TokenPayload(BaseModel):
    user: UserSummary
    token: str = Field(description="'bearer <jwt>'")
    expires_in: int = Field(description="Token lifetime in seconds.")
