"""Custom exception classes for the Library Management API.

Each exception carries the HTTP status it is reported with. Managers raise
them; the handlers registered in ``app.py`` turn them into response envelopes.
"""

from http import HTTPStatus


class LibraryError(Exception):
    """Base exception for all domain errors."""

    status_code: int = HTTPStatus.BAD_REQUEST

    def __init__(self, message: str):
        """Initialize the exception.

        Args:
            message: User-facing message describing the failure.
        """
        self.message = message
        super().__init__(message)


class ValidationError(LibraryError):
    """Raised when input data breaks a field rule."""

    status_code = HTTPStatus.PRECONDITION_FAILED


class BadRequestError(LibraryError):
    """Raised when a request violates a domain rule."""

    status_code = HTTPStatus.BAD_REQUEST


class UnauthorizedError(LibraryError):
    """Raised when a credential is missing, invalid or expired."""

    status_code = HTTPStatus.UNAUTHORIZED


class ForbiddenError(LibraryError):
    """Raised when an authenticated user lacks a permission."""

    status_code = HTTPStatus.FORBIDDEN


class NotFoundError(LibraryError):
    """Raised when an entity id does not resolve."""

    status_code = HTTPStatus.NOT_FOUND


class PreconditionFailedError(LibraryError):
    """Raised when the current entity state forbids the operation."""

    status_code = HTTPStatus.PRECONDITION_FAILED
