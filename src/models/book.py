"""Book database model."""

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .base import Base

BOOK_AVAILABLE = "available"
BOOK_UNAVAILABLE = "unavailable"


class BookModel(Base):
    """Book database model.

    ``status`` is ``unavailable`` exactly when ``borrow_user_id`` is set. Rows
    with ``deleted_at`` set are soft-deleted and hidden from the catalog.
    """

    __tablename__ = "books"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, unique=True, nullable=False)
    slug = Column(String, unique=True, index=True, nullable=False)
    details = Column(Text, nullable=True)
    status = Column(String, nullable=False, default=BOOK_AVAILABLE)
    borrow_user_id = Column(
        String, ForeignKey("users.id", ondelete="SET NULL"), index=True, nullable=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    borrower = relationship("UserModel")
    borrowings = relationship("BorrowHistoryModel", back_populates="book")
