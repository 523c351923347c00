"""Shared schema definitions."""

from typing import Any

from pydantic import BaseModel, ConfigDict


class ApiResponse(BaseModel):
    """Response envelope returned by every endpoint.

    Built once per request and never mutated afterwards.
    """

    model_config = ConfigDict(frozen=True)

    data: Any = None
    message: str = ""
    error: str = ""
