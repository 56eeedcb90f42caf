"""Error taxonomy shared by the image store, repository and HTTP layer.

Every expected failure is a ``CatalogError`` carrying the HTTP status it maps
to and a human readable message. The application registers a single handler
that renders these as ``{"message": ...}``.
"""

from fastapi import status


class CatalogError(Exception):
    """Base class for expected catalog failures."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal Server Error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidRequestShape(CatalogError):
    """Malformed body, missing upload part, unexpected file part."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Malformed request"


class InvalidMediaType(InvalidRequestShape):
    default_message = "Only images are allowed (JPEG, JPG, PNG, GIF)"


class PayloadTooLarge(InvalidRequestShape):
    default_message = "File too large"


class ValidationFailed(CatalogError):
    """Missing required fields or a record that violates the Book schema."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"


class InvalidIdentifier(CatalogError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid book ID format"


class DuplicateIsbn(CatalogError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Book with this ISBN already exists"


class NotFound(CatalogError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Book not found"


class StoreUnavailable(CatalogError):
    """The store could not complete an operation (connection loss, schema drift)."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Store unavailable"
