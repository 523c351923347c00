"""Book catalogue routes."""

from typing import Any, Dict

from fastapi import APIRouter

from core.dependencies import AuthorizerDep, BookManagerDep, CurrentUserDep, PaginationDep
from core.responses import forbidden, success
from models.user import UserModel
from schemas.book import BookRequest
from utils.converters import model_to_book

router = APIRouter(prefix="/api/books", tags=["Book"])


def _is_admin(user: UserModel) -> bool:
    return user.role is not None and user.role.slug == "admin"


def _present(book: Dict[str, Any], show_borrower: bool) -> Dict[str, Any]:
    """Copy a serialized book, dropping the borrower for non-admins."""
    data = dict(book)
    if not show_borrower:
        data.pop("borrower_details", None)
    return data


@router.get("", summary="List books")
def list_books(
    pagination: PaginationDep,
    current_user: CurrentUserDep,
    authorizer: AuthorizerDep,
    book_manager: BookManagerDep,
):
    """List books matching ``search_term`` in name or details.

    Args:
        pagination: page, limit and search_term query parameters.
        current_user: Current authenticated user.
        authorizer: Injected Authorizer.
        book_manager: Injected BookManager instance.

    Returns:
        Envelope with "books" and "total" (all matches, not just this page).
    """
    if not authorizer.authorize(current_user, "view-book"):
        return forbidden()
    listing = book_manager.list_books(
        pagination.page, pagination.limit, pagination.search_term
    )
    show_borrower = _is_admin(current_user)
    return success(
        "Books retrieved successfully.",
        {
            "books": [_present(b, show_borrower) for b in listing["books"]],
            "total": listing["total"],
        },
    )


@router.post("", summary="Create a book")
def create_book(
    req: BookRequest,
    current_user: CurrentUserDep,
    authorizer: AuthorizerDep,
    book_manager: BookManagerDep,
):
    if not authorizer.authorize(current_user, "create-book"):
        return forbidden()
    book = book_manager.create_book(req.name, req.details)
    data = _present(model_to_book(book).model_dump(), _is_admin(current_user))
    return success("Book added sucessfully", data)


@router.get("/{book_id}", summary="Show a book")
def show_book(
    book_id: str,
    current_user: CurrentUserDep,
    authorizer: AuthorizerDep,
    book_manager: BookManagerDep,
):
    if not authorizer.authorize(current_user, "view-book"):
        return forbidden()
    book = book_manager.get_book(book_id)
    data = _present(model_to_book(book).model_dump(), _is_admin(current_user))
    return success("Book details fetch sucessfully", data)


@router.put("/{book_id}", summary="Update a book")
def update_book(
    book_id: str,
    req: BookRequest,
    current_user: CurrentUserDep,
    authorizer: AuthorizerDep,
    book_manager: BookManagerDep,
):
    if not authorizer.authorize(current_user, "edit-book"):
        return forbidden()
    book = book_manager.update_book(book_id, req.name, req.details)
    data = _present(model_to_book(book).model_dump(), _is_admin(current_user))
    return success("Book details updated sucessfully", data)


@router.delete("/{book_id}", summary="Delete a book")
def delete_book(
    book_id: str,
    current_user: CurrentUserDep,
    authorizer: AuthorizerDep,
    book_manager: BookManagerDep,
):
    """Soft-delete a book. Refused with 412 while the book is borrowed."""
    if not authorizer.authorize(current_user, "delete-book"):
        return forbidden()
    book_manager.delete_book(book_id)
    return success("Book deleted sucessfully")
