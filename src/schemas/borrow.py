"""Borrow and return schema definitions."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class BorrowRequest(BaseModel):
    book_id: str = Field(min_length=1)


class ReturnRequest(BaseModel):
    borrow_id: str = Field(min_length=1)
    book_id: str = Field(min_length=1)


class HistoryBook(BaseModel):
    id: str
    title: str
    details: Optional[str] = None
    current_status: str = Field(description="'Available' or 'Not available'")


class BorrowHistoryEntry(BaseModel):
    """A borrow record as seen by the borrower."""

    id: str
    borrow_date: Optional[datetime] = None
    status: str
    return_date: Optional[datetime] = None
    user_id: str
    book: HistoryBook


class HistoryUser(BaseModel):
    id: str
    name: str
    email: str


class BookBorrowerEntry(BaseModel):
    """A borrow record as seen from the book's side."""

    id: str
    book_id: str
    borrow_date: Optional[datetime] = None
    status: str
    return_date: Optional[datetime] = None
    user_details: HistoryUser
