"""Borrow/return routes and borrow history listings."""

from fastapi import APIRouter, BackgroundTasks

from core.dependencies import (
    AuthorizerDep,
    BorrowHistoryManagerDep,
    CurrentUserDep,
    LendingManagerDep,
    PaginationDep,
)
from core.responses import forbidden, success
from schemas.borrow import BorrowRequest, ReturnRequest
from utils.converters import model_to_borrower_entry, model_to_history_entry

router = APIRouter(prefix="/api", tags=["Lending"])


@router.post("/borrow-book", summary="Borrow a book")
def borrow_book(
    req: BorrowRequest,
    background_tasks: BackgroundTasks,
    current_user: CurrentUserDep,
    authorizer: AuthorizerDep,
    lending_manager: LendingManagerDep,
):
    """Borrow a book for the current user.

    The confirmation mail is sent after the response; its outcome does not
    affect this request.

    Raises:
        NotFoundError: If the book does not exist.
        BadRequestError: If the book is already borrowed.
    """
    if not authorizer.authorize(current_user, "borrow-book"):
        return forbidden()
    lending_manager.borrow(req.book_id, current_user, background_tasks)
    return success("Book borrow sucessfully")


@router.post("/return-book", summary="Return a book")
def return_book(
    req: ReturnRequest,
    current_user: CurrentUserDep,
    authorizer: AuthorizerDep,
    lending_manager: LendingManagerDep,
):
    """Return a book using the borrow record id from the borrowed list."""
    if not authorizer.authorize(current_user, "return-book"):
        return forbidden()
    lending_manager.return_book(req.borrow_id, req.book_id, current_user)
    return success("Book return sucessfully.")


@router.get("/get-borrowed-list", summary="Borrow history of the current user")
def get_borrowed_list(
    pagination: PaginationDep,
    current_user: CurrentUserDep,
    authorizer: AuthorizerDep,
    history_manager: BorrowHistoryManagerDep,
):
    if not authorizer.authorize(current_user, "borrow-book"):
        return forbidden()
    records, total = history_manager.borrowed_by_user(
        current_user.id, pagination.page, pagination.limit, pagination.search_term
    )
    return success(
        "Books get sucessfully.",
        {"borrowing_history": [model_to_history_entry(r) for r in records], "total": total},
    )


@router.get("/get-bookwise-borrow-list/{book_id}", summary="Borrowers of a book")
def get_bookwise_borrow_list(
    book_id: str,
    pagination: PaginationDep,
    current_user: CurrentUserDep,
    authorizer: AuthorizerDep,
    history_manager: BorrowHistoryManagerDep,
):
    """List who borrowed a book; ``search_term`` matches borrower name or email."""
    if not authorizer.authorize(current_user, "create-book"):
        return forbidden()
    records, total = history_manager.borrowers_of_book(
        book_id, pagination.page, pagination.limit, pagination.search_term
    )
    return success(
        "Details get sucessfully.",
        {"borrowing_history": [model_to_borrower_entry(r) for r in records], "total": total},
    )
