"""Book schema definitions."""

from typing import Optional

from pydantic import BaseModel, Field


class BookRequest(BaseModel):
    """Body of book create and update requests."""

    name: str = Field(min_length=1, max_length=255)
    details: str = Field(min_length=1)


class BookInfo(BaseModel):
    id: str
    name: str
    slug: str
    details: Optional[str] = None
    status: str
    # Only present for admins; an empty dict means "not borrowed"
    borrower_details: Optional[dict] = None
