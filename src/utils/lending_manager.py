"""Borrow/return workflow.

A book moves Available -> Borrowed -> Available. The book row carries the
current borrower and the borrow_histories table keeps one row per borrow.
Only this module writes either of them during lending.

Both transitions use a conditional UPDATE on the book row (compare-and-set on
``borrow_user_id``) so that two concurrent requests cannot both win.
"""

import logging
from datetime import datetime
from typing import Optional

import pytz
from fastapi import BackgroundTasks
from sqlalchemy.orm import Session

from core.exceptions import BadRequestError
from models.book import BOOK_AVAILABLE, BOOK_UNAVAILABLE, BookModel
from models.borrow_history import (
    BORROW_STATUS_BORROWED,
    BORROW_STATUS_RETURNED,
    BorrowHistoryModel,
)
from models.user import UserModel
from utils.book_manager import BookManager
from utils.notifier import BookBorrowed, Notifier

logger = logging.getLogger(__name__)

ALREADY_BORROWED_BY_YOU = "You already borrow this book, Please try with another one."
ALREADY_BORROWED_BY_OTHER = (
    "You can not borrow this book, this book is already borrow by another user."
)
NOT_BORROWED = "No one has borrowed this book yet."
INVALID_BORROW_IDS = "Invalid Book Id Or Borrow id, please try again with valid ids."
ALREADY_RETURNED = (
    "You can not return multiple same book with multiple times. "
    "Please try again with other details."
)
NOT_YOUR_BORROW = "You haven't borrow this book, they you can not return this book."


class LendingManager:
    """Runs the borrow and return transitions."""

    def __init__(self, db: Session, books: BookManager, notifier: Optional[Notifier] = None):
        """Initialize LendingManager.

        Args:
            db: SQLAlchemy Session.
            books: Catalogue access, also used to drop cached listings.
            notifier: Receives BookBorrowed events. None disables notifications.
        """
        self.db = db
        self.books = books
        self.notifier = notifier

    @staticmethod
    def _borrowed_message(book: BookModel, user: UserModel) -> str:
        if book.borrow_user_id == user.id:
            return ALREADY_BORROWED_BY_YOU
        return ALREADY_BORROWED_BY_OTHER

    def borrow(
        self,
        book_id: str,
        user: UserModel,
        background_tasks: Optional[BackgroundTasks] = None,
    ) -> BorrowHistoryModel:
        """Borrow a book for ``user``.

        Args:
            book_id: Id of the book to borrow.
            user: The borrowing user.
            background_tasks: Where the notification is scheduled.

        Returns:
            The new BorrowHistoryModel row.

        Raises:
            NotFoundError: If the book does not exist.
            BadRequestError: If the book is already borrowed, by this user or another.
        """
        book = self.books.get_book(book_id)
        if book.borrow_user_id is not None:
            raise BadRequestError(self._borrowed_message(book, user))

        now = datetime.now(pytz.utc)
        claimed = (
            self.db.query(BookModel)
            .filter(
                BookModel.id == book.id,
                BookModel.borrow_user_id.is_(None),
                BookModel.deleted_at.is_(None),
            )
            .update(
                {BookModel.borrow_user_id: user.id, BookModel.status: BOOK_UNAVAILABLE},
                synchronize_session=False,
            )
        )
        if claimed == 0:
            # Another request borrowed (or deleted) the book since we read it
            self.db.rollback()
            book = self.books.get_book(book_id)
            if book.borrow_user_id is None:
                raise BadRequestError(ALREADY_BORROWED_BY_OTHER)
            raise BadRequestError(self._borrowed_message(book, user))

        history = BorrowHistoryModel(
            book_id=book.id,
            borrow_user_id=user.id,
            borrow_date=now,
            status=BORROW_STATUS_BORROWED,
        )
        self.db.add(history)
        self.db.commit()
        self.db.refresh(history)
        self.books.invalidate_listings()
        logger.info("User %s borrowed book %s (borrow %s)", user.id, book.id, history.id)

        if self.notifier is not None and background_tasks is not None:
            event = BookBorrowed(
                user_id=user.id,
                user_name=user.name,
                user_email=user.email,
                book_id=book.id,
                book_name=book.name,
                borrowed_at=now,
            )
            self.notifier.book_borrowed(event, background_tasks)
        return history

    def return_book(self, borrow_id: str, book_id: str, user: UserModel) -> BorrowHistoryModel:
        """Return a borrowed book.

        The borrow record is identified by the explicit (borrow_id, book_id)
        pair; the book's current borrower must be ``user``.

        Args:
            borrow_id: Id of the borrow record being closed.
            book_id: Id of the book being returned.
            user: The returning user.

        Returns:
            The closed BorrowHistoryModel row.

        Raises:
            NotFoundError: If the book does not exist.
            BadRequestError: If nobody borrowed the book, the ids do not match a
                record, the record is already returned, or the book is held
                by another user.
        """
        book = self.books.get_book(book_id)
        if book.borrow_user_id is None:
            raise BadRequestError(NOT_BORROWED)

        history = (
            self.db.query(BorrowHistoryModel)
            .filter(BorrowHistoryModel.id == borrow_id, BorrowHistoryModel.book_id == book.id)
            .first()
        )
        if history is None:
            raise BadRequestError(INVALID_BORROW_IDS)
        if history.status == BORROW_STATUS_RETURNED and history.return_date is not None:
            raise BadRequestError(ALREADY_RETURNED)
        if book.borrow_user_id != user.id:
            raise BadRequestError(NOT_YOUR_BORROW)

        released = (
            self.db.query(BookModel)
            .filter(BookModel.id == book.id, BookModel.borrow_user_id == user.id)
            .update(
                {BookModel.borrow_user_id: None, BookModel.status: BOOK_AVAILABLE},
                synchronize_session=False,
            )
        )
        closed = (
            self.db.query(BorrowHistoryModel)
            .filter(
                BorrowHistoryModel.id == history.id,
                BorrowHistoryModel.borrow_user_id == user.id,
                BorrowHistoryModel.status == BORROW_STATUS_BORROWED,
            )
            .update(
                {
                    BorrowHistoryModel.return_date: datetime.now(pytz.utc),
                    BorrowHistoryModel.status: BORROW_STATUS_RETURNED,
                },
                synchronize_session=False,
            )
        )
        if released == 0 or closed == 0:
            # A concurrent request changed the book or the record since we read them
            self.db.rollback()
            raise BadRequestError(NOT_YOUR_BORROW if released == 0 else ALREADY_RETURNED)

        self.db.commit()
        self.db.refresh(history)
        self.books.invalidate_listings()
        logger.info("User %s returned book %s (borrow %s)", user.id, book.id, history.id)
        return history
