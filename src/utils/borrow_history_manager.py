"""Read-only views over borrow history."""

import logging
from typing import List, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from models.book import BookModel
from models.borrow_history import BorrowHistoryModel
from models.user import UserModel
from utils.book_manager import BookManager
from utils.pagination import contains_ci, paginate

logger = logging.getLogger(__name__)


class BorrowHistoryManager:
    """Paginated, searchable listings of borrow records."""

    def __init__(self, db: Session, books: BookManager):
        self.db = db
        self.books = books

    def borrowed_by_user(
        self, user_id: str, page: int, limit: int, search_term: str = ""
    ) -> Tuple[List[BorrowHistoryModel], int]:
        """List a user's borrow records, newest first.

        Args:
            user_id: The borrower.
            page: 1-based page number.
            limit: Page size, 0 for all records.
            search_term: Case-insensitive filter on the book name.

        Returns:
            Tuple of (records, total matching records).
        """
        query = (
            self.db.query(BorrowHistoryModel)
            .join(BookModel, BookModel.id == BorrowHistoryModel.book_id)
            .options(joinedload(BorrowHistoryModel.book))
            .filter(BorrowHistoryModel.borrow_user_id == user_id)
        )
        if search_term:
            query = query.filter(contains_ci(BookModel.name, search_term))
        query = query.order_by(BorrowHistoryModel.borrow_date.desc(), BorrowHistoryModel.id)
        return paginate(query, page, limit)

    def borrowers_of_book(
        self, book_id: str, page: int, limit: int, search_term: str = ""
    ) -> Tuple[List[BorrowHistoryModel], int]:
        """List who borrowed a book, newest first.

        Args:
            book_id: The book.
            page: 1-based page number.
            limit: Page size, 0 for all records.
            search_term: Case-insensitive filter on borrower name or email.

        Returns:
            Tuple of (records, total matching records).

        Raises:
            NotFoundError: If the book does not exist.
        """
        book = self.books.get_book(book_id)
        query = (
            self.db.query(BorrowHistoryModel)
            .join(UserModel, UserModel.id == BorrowHistoryModel.borrow_user_id)
            .options(joinedload(BorrowHistoryModel.user))
            .filter(BorrowHistoryModel.book_id == book.id)
        )
        if search_term:
            query = query.filter(
                or_(
                    contains_ci(UserModel.name, search_term),
                    contains_ci(UserModel.email, search_term),
                )
            )
        query = query.order_by(BorrowHistoryModel.borrow_date.desc(), BorrowHistoryModel.id)
        return paginate(query, page, limit)
