"""Borrow history database model."""

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship

from .base import Base

BORROW_STATUS_BORROWED = "Borrowed"
BORROW_STATUS_RETURNED = "Returned"


class BorrowHistoryModel(Base):
    """One row per borrow, closed on return."""

    __tablename__ = "borrow_histories"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    book_id = Column(
        String, ForeignKey("books.id", ondelete="CASCADE"), index=True, nullable=False
    )
    borrow_user_id = Column(
        String, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    borrow_date = Column(DateTime(timezone=True), nullable=True)
    return_date = Column(DateTime(timezone=True), nullable=True)
    status = Column(String, nullable=False, default=BORROW_STATUS_BORROWED)

    book = relationship("BookModel", back_populates="borrowings")
    user = relationship("UserModel", back_populates="borrowings")
