"""Book catalogue management.

This module provides CRUD over books plus the cached, searchable listing.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

import pytz
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from config import BOOK_LIST_CACHE_TTL
from core.exceptions import NotFoundError, PreconditionFailedError, ValidationError
from models.book import BOOK_AVAILABLE, BookModel
from utils.converters import model_to_book
from utils.list_cache import ListCache
from utils.pagination import contains_ci, paginate
from utils.slug import slugify

logger = logging.getLogger(__name__)

BOOK_LIST_NAMESPACE = "books"
BOOK_NOT_FOUND_MESSAGE = "No any book found with this id, please try again with valid id."


class BookManager:
    """Manages the book catalogue using SQLAlchemy."""

    def __init__(self, db: Session, cache: ListCache):
        """Initialize BookManager.

        Args:
            db: SQLAlchemy Session.
            cache: Cache for book listings.
        """
        self.db = db
        self.cache = cache

    def _active(self):
        return self.db.query(BookModel).filter(BookModel.deleted_at.is_(None))

    def get_book(self, book_id: str) -> BookModel:
        """Get a book that has not been deleted.

        Raises:
            NotFoundError: If no such book exists.
        """
        book = (
            self._active()
            .options(joinedload(BookModel.borrower))
            .filter(BookModel.id == book_id)
            .first()
        )
        if book is None:
            raise NotFoundError(BOOK_NOT_FOUND_MESSAGE)
        return book

    def list_books(self, page: int, limit: int, search_term: str = "") -> Dict[str, Any]:
        """List books, served from cache when possible.

        Args:
            page: 1-based page number.
            limit: Page size, 0 for all matches.
            search_term: Case-insensitive substring matched against name or details.

        Returns:
            Dictionary with "books" (serialized BookInfo dicts) and "total".
        """
        search_term = search_term or ""
        key = ListCache.make_key(BOOK_LIST_NAMESPACE, page, limit, search_term=search_term)

        def load() -> Dict[str, Any]:
            query = self._active().options(joinedload(BookModel.borrower))
            if search_term:
                query = query.filter(
                    or_(
                        contains_ci(BookModel.name, search_term),
                        contains_ci(BookModel.details, search_term),
                    )
                )
            books, total = paginate(query.order_by(BookModel.created_at, BookModel.name), page, limit)
            return {
                "books": [model_to_book(b).model_dump() for b in books],
                "total": total,
            }

        return self.cache.remember(key, BOOK_LIST_CACHE_TTL, load)

    def invalidate_listings(self) -> None:
        self.cache.forget_namespace(BOOK_LIST_NAMESPACE)

    def _check_name(self, name: str, exclude_id: Optional[str] = None) -> str:
        slug = slugify(name)
        if not slug:
            raise ValidationError("The name must contain at least one letter or digit.")

        # Deleted books keep their name reserved
        query = self.db.query(BookModel).filter(
            (BookModel.name == name) | (BookModel.slug == slug)
        )
        if exclude_id is not None:
            query = query.filter(BookModel.id != exclude_id)
        if query.first() is not None:
            raise ValidationError("The name has already been taken.")
        return slug

    def create_book(self, name: str, details: str) -> BookModel:
        """Add a book to the catalogue.

        Raises:
            ValidationError: If the name is already taken.
        """
        name = name.strip()
        slug = self._check_name(name)
        book = BookModel(name=name, slug=slug, details=details, status=BOOK_AVAILABLE)
        self.db.add(book)
        self.db.commit()
        self.db.refresh(book)
        self.invalidate_listings()
        logger.info("Created book %s (%s)", book.slug, book.id)
        return book

    def update_book(self, book_id: str, name: str, details: str) -> BookModel:
        """Update a book; the slug follows the name.

        Raises:
            NotFoundError: If the book does not exist.
            ValidationError: If the name is already taken by another book.
        """
        book = self.get_book(book_id)
        name = name.strip()
        book.slug = self._check_name(name, exclude_id=book.id)
        book.name = name
        book.details = details
        self.db.commit()
        self.db.refresh(book)
        self.invalidate_listings()
        logger.info("Updated book %s (%s)", book.slug, book.id)
        return book

    def delete_book(self, book_id: str) -> None:
        """Soft-delete a book.

        Raises:
            NotFoundError: If the book does not exist.
            PreconditionFailedError: If the book is currently borrowed.
        """
        book = self.get_book(book_id)
        if book.borrow_user_id is not None:
            raise PreconditionFailedError(
                "You can not delete this book, because this book already borrowed by someone."
            )

        # Conditional on no borrower so a concurrent borrow is not lost
        deleted = (
            self.db.query(BookModel)
            .filter(
                BookModel.id == book.id,
                BookModel.borrow_user_id.is_(None),
                BookModel.deleted_at.is_(None),
            )
            .update({BookModel.deleted_at: datetime.now(pytz.utc)}, synchronize_session=False)
        )
        if deleted == 0:
            self.db.rollback()
            raise PreconditionFailedError(
                "You can not delete this book, because this book already borrowed by someone."
            )
        self.db.commit()
        self.invalidate_listings()
        logger.info("Deleted book %s", book_id)
