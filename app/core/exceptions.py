"""
Error taxonomy for the catalog engine.

Client errors (4xx) carry a message that is safe to return as-is. Internal
errors (5xx) keep their detailed message for the logs only; handlers answer
them with ``CatalogException.public_message``.
"""

from typing import Optional


class CatalogException(Exception):
    status_code = 500
    public_message = "Internal server error"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        stage: Optional[str] = None,
    ):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.stage = stage
        super().__init__(message)

    @property
    def is_client_error(self) -> bool:
        return self.status_code < 500

    @property
    def client_message(self) -> str:
        return self.message if self.is_client_error else self.public_message


class BadInput(CatalogException):
    """Missing or malformed request fields."""

    status_code = 400


class InvalidName(BadInput):
    """Image filename does not satisfy the stored-image naming contract."""


class NotFound(CatalogException):
    status_code = 404


class ConstraintViolation(CatalogException):
    """Referential integrity failure on insert."""


class IOFailure(CatalogException):
    """Image destination could not be created or written."""


class SourceUnreadable(CatalogException):
    """Uploaded image stream could not be read to the end."""
