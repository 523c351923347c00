"""Dependency injection module for FastAPI.

This module provides dependency injection functions for FastAPI routes.
Managers get a request-scoped DB session; the list cache and notifier are
process-wide singletons.
"""

from typing import Annotated, Optional

from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from config import DEFAULT_PAGE, DEFAULT_PAGE_SIZE
from core.database import get_db
from core.exceptions import UnauthorizedError
from models.user import UserModel
from utils import auth_manager
from utils import authorizer
from utils import book_manager
from utils import borrow_history_manager
from utils import lending_manager
from utils import permission_manager
from utils import role_manager
from utils import user_manager
from utils.list_cache import ListCache, get_list_cache
from utils.notifier import Notifier, get_notifier

# auto_error=False so a missing header is reported through our own envelope
security = HTTPBearer(auto_error=False)


def get_user_manager(db: Session = Depends(get_db)) -> user_manager.UserManager:
    """Get UserManager instance with request-scoped DB session.

    Args:
        db: Database session.

    Returns:
        UserManager instance.
    """
    return user_manager.UserManager(db)


def get_auth_manager(
    db: Session = Depends(get_db),
    users: user_manager.UserManager = Depends(get_user_manager),
) -> auth_manager.AuthManager:
    """Get AuthManager instance with request-scoped DB session."""
    return auth_manager.AuthManager(db, users)


def get_authorizer(db: Session = Depends(get_db)) -> authorizer.Authorizer:
    """Get Authorizer instance with request-scoped DB session."""
    return authorizer.Authorizer(db)


def get_permission_manager(
    db: Session = Depends(get_db),
) -> permission_manager.PermissionManager:
    """Get PermissionManager instance with request-scoped DB session."""
    return permission_manager.PermissionManager(db)


def get_role_manager(db: Session = Depends(get_db)) -> role_manager.RoleManager:
    """Get RoleManager instance with request-scoped DB session."""
    return role_manager.RoleManager(db)


def get_book_manager(
    db: Session = Depends(get_db),
    cache: ListCache = Depends(get_list_cache),
) -> book_manager.BookManager:
    """Get BookManager instance with request-scoped DB session.

    Args:
        db: Database session.
        cache: Shared listing cache.

    Returns:
        BookManager instance.
    """
    return book_manager.BookManager(db, cache)


def get_lending_manager(
    db: Session = Depends(get_db),
    books: book_manager.BookManager = Depends(get_book_manager),
    notifier: Notifier = Depends(get_notifier),
) -> lending_manager.LendingManager:
    """Get LendingManager instance with request-scoped DB session."""
    return lending_manager.LendingManager(db, books, notifier)


def get_borrow_history_manager(
    db: Session = Depends(get_db),
    books: book_manager.BookManager = Depends(get_book_manager),
) -> borrow_history_manager.BorrowHistoryManager:
    """Get BorrowHistoryManager instance with request-scoped DB session."""
    return borrow_history_manager.BorrowHistoryManager(db, books)


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """Extract the raw bearer token from the Authorization header.

    Raises:
        UnauthorizedError: If no bearer token was sent.
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Token not provided")
    return credentials.credentials


def get_current_user(
    token: str = Depends(get_bearer_token),
    auth: auth_manager.AuthManager = Depends(get_auth_manager),
) -> UserModel:
    """Get current authenticated user.

    Raises:
        UnauthorizedError: If the token is invalid or the user is gone.
    """
    return auth.current_user(token)


class Pagination:
    """Common ``page``/``limit``/``search_term`` query parameters."""

    def __init__(
        self,
        page: int = Query(DEFAULT_PAGE, ge=1, description="1-based page number."),
        limit: int = Query(
            DEFAULT_PAGE_SIZE, ge=0, description="Page size; 0 returns every match."
        ),
        search_term: str = Query("", description="Case-insensitive search text."),
    ):
        self.page = page
        self.limit = limit
        self.search_term = search_term.strip()


# Type aliases for dependency injection
UserManagerDep = Annotated[user_manager.UserManager, Depends(get_user_manager)]
AuthManagerDep = Annotated[auth_manager.AuthManager, Depends(get_auth_manager)]
AuthorizerDep = Annotated[authorizer.Authorizer, Depends(get_authorizer)]
PermissionManagerDep = Annotated[
    permission_manager.PermissionManager, Depends(get_permission_manager)
]
RoleManagerDep = Annotated[role_manager.RoleManager, Depends(get_role_manager)]
BookManagerDep = Annotated[book_manager.BookManager, Depends(get_book_manager)]
LendingManagerDep = Annotated[lending_manager.LendingManager, Depends(get_lending_manager)]
BorrowHistoryManagerDep = Annotated[
    borrow_history_manager.BorrowHistoryManager, Depends(get_borrow_history_manager)
]
CurrentUserDep = Annotated[UserModel, Depends(get_current_user)]
BearerTokenDep = Annotated[str, Depends(get_bearer_token)]
PaginationDep = Annotated[Pagination, Depends()]
