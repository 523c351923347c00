"""Conversions from database models to API schemas."""

from models.book import BOOK_AVAILABLE, BookModel
from models.borrow_history import BorrowHistoryModel
from models.permission import PermissionModel
from models.role import RoleModel
from models.user import UserModel
from schemas.book import BookInfo
from schemas.borrow import (
    BookBorrowerEntry,
    BorrowHistoryEntry,
    HistoryBook,
    HistoryUser,
)
from schemas.role import PermissionInfo, RoleInfo
from schemas.user import UserSummary


def model_to_user_summary(model: UserModel) -> UserSummary:
    """Convert a user to its public summary; ``role`` is the role name."""
    role = model.role.name if model.role is not None else None
    return UserSummary(id=model.id, name=model.name, email=model.email, role=role)


def model_to_permission(model: PermissionModel) -> PermissionInfo:
    return PermissionInfo(id=model.id, name=model.name, slug=model.slug)


def model_to_role(model: RoleModel) -> RoleInfo:
    return RoleInfo(
        id=model.id,
        name=model.name,
        slug=model.slug,
        permissions=[p.slug for p in model.permissions],
    )


def model_to_book(model: BookModel) -> BookInfo:
    """Convert a book including its borrower.

    Callers strip ``borrower_details`` for viewers who may not see it.
    """
    borrower_details = {}
    if model.borrower is not None:
        borrower_details = {
            "id": model.borrower.id,
            "name": model.borrower.name,
            "email": model.borrower.email,
        }
    return BookInfo(
        id=model.id,
        name=model.name,
        slug=model.slug,
        details=model.details,
        status=model.status,
        borrower_details=borrower_details,
    )


def model_to_history_entry(model: BorrowHistoryModel) -> BorrowHistoryEntry:
    book = model.book
    return BorrowHistoryEntry(
        id=model.id,
        borrow_date=model.borrow_date,
        status=model.status,
        return_date=model.return_date,
        user_id=model.borrow_user_id,
        book=HistoryBook(
            id=book.id,
            title=book.name,
            details=book.details,
            current_status="Available" if book.status == BOOK_AVAILABLE else "Not available",
        ),
    )


def model_to_borrower_entry(model: BorrowHistoryModel) -> BookBorrowerEntry:
    user = model.user
    return BookBorrowerEntry(
        id=model.id,
        book_id=model.book_id,
        borrow_date=model.borrow_date,
        status=model.status,
        return_date=model.return_date,
        user_details=HistoryUser(id=user.id, name=user.name, email=user.email),
    )
