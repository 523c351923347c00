"""Authentication routes.

This module handles HTTP endpoints for registration, login and the token
lifecycle.
"""

import logging

from fastapi import APIRouter

from core.dependencies import (
    AuthManagerDep,
    BearerTokenDep,
    CurrentUserDep,
    UserManagerDep,
)
from core.responses import success
from schemas.user import LoginRequest, RegisterRequest, TokenPayload
from utils.converters import model_to_user_summary

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Auth"])


def _register(req: RegisterRequest, role_slug: str, user_manager: UserManagerDep):
    user = user_manager.create_user(
        name=req.name,
        email=req.email,
        password=req.password,
        role_slug=role_slug,
    )
    # Registration does not log the user in
    return success(
        "User registered sucessfully",
        {"user": model_to_user_summary(user)},
    )


@router.post("/register", summary="Register a user")
def register(req: RegisterRequest, user_manager: UserManagerDep):
    """Register a new account under the role given in the body.

    Args:
        req: Registration request with name, email, password and role slug.
        user_manager: Injected UserManager instance.

    Returns:
        Envelope with the user summary. No token is issued.
    """
    return _register(req, req.role, user_manager)


@router.post("/{role_slug}/register", summary="Register a user under a role type")
def register_with_role(role_slug: str, req: RegisterRequest, user_manager: UserManagerDep):
    """Register a new account under the role named in the path.

    ``POST /api/user/register`` and ``POST /api/admin/register`` pick the
    role from the path; a role in the body is ignored.
    """
    return _register(req, role_slug, user_manager)


@router.post("/login", summary="Log in")
def login(req: LoginRequest, auth: AuthManagerDep):
    """Login with email and password.

    Returns:
        Envelope with the user, a bearer token and its lifetime in seconds.

    Raises:
        UnauthorizedError: If the credentials do not match.
    """
    token, user, expires_in = auth.login(req.email, req.password)
    payload = TokenPayload(
        user=model_to_user_summary(user),
        token=f"bearer {token}",
        expires_in=expires_in,
    )
    return success("User login sucessfully", payload)


@router.post("/logout", summary="Log out")
def logout(token: BearerTokenDep, auth: AuthManagerDep):
    """Revoke the presented token. Using it again yields 401."""
    auth.logout(token)
    return success("Successfully logged out")


@router.post("/refresh", summary="Refresh the token")
def refresh(token: BearerTokenDep, auth: AuthManagerDep):
    """Exchange the presented token for a new one.

    Expired tokens are accepted while their refresh window is open.
    """
    new_token = auth.refresh(token)
    return success(
        "Token refreshed successfully",
        {"token": f"bearer {new_token}", "expires_in": auth.expires_in},
    )


@router.api_route("/me", methods=["GET", "POST"], summary="Current user")
def me(current_user: CurrentUserDep):
    """Get current authenticated user information."""
    return success("Details get sucessfully", {"user": model_to_user_summary(current_user)})
