"""Book API router with CRUD operations and cover uploads.

Handlers validate identifiers and field presence before touching the store,
store an uploaded ``image`` part before the repository write (removing it
again when that write is rejected), and run the blocking repository calls
in the threadpool. Expected failures are
``CatalogError`` subclasses rendered by the application's exception handler.
"""

from collections.abc import Callable
from typing import Any

from fastapi import APIRouter, Depends, Request, status
from loguru import logger
from starlette.concurrency import run_in_threadpool

from src.app.api.http.deps import get_book_repository, get_image_store
from src.app.api.utils.request_body import BookRequest, read_book_request
from src.app.core.errors import CatalogError, InvalidRequestShape, ValidationFailed
from src.app.core.services import ImageStore
from src.app.entities.core._base import CamelModel
from src.app.entities.service.book import Book, BookRepository
from src.app.entities.service.book.validation import (
    validate_create,
    validate_identifier,
    validate_update,
)

router = APIRouter()


class BookList(CamelModel):
    count: int
    data: list[Book]


class BookUpdated(CamelModel):
    message: str
    book: Book


class BookDeleted(CamelModel):
    message: str
    deleted_book: Book


class ImageUploaded(CamelModel):
    message: str
    image_url: str


async def _resolve_fields(
    parsed: BookRequest, image_store: ImageStore
) -> tuple[dict[str, Any], str | None]:
    """Merge the uploaded image reference into the request fields.

    A freshly uploaded image always replaces any ``imageUrl`` sent alongside
    it. A client-supplied, non-empty text ``imageUrl`` must name a stored
    image; other types are left for the record schema to reject.

    Returns the fields and the reference written by this request, if any.
    """
    fields = dict(parsed.fields)
    image_url = fields.get("imageUrl")
    if parsed.image is not None:
        if image_url:
            logger.debug("Uploaded image overrides client imageUrl {}", image_url)
        uploaded = await image_store.save_upload(parsed.image)
        fields["imageUrl"] = uploaded
        return fields, uploaded
    if isinstance(image_url, str) and image_url and not image_store.exists(image_url):
        raise ValidationFailed(f"Image not found: {image_url}")
    return fields, None


async def _write_with_upload(
    image_store: ImageStore, uploaded: str | None, write: Callable[..., Book], *args: Any
) -> Book:
    """Run a repository write, discarding this request's upload if it is rejected."""
    try:
        return await run_in_threadpool(write, *args)
    except CatalogError:
        if uploaded is not None:
            await run_in_threadpool(image_store.delete, uploaded)
            logger.info("Discarded image {} of rejected write", uploaded)
        raise


@router.post("/upload", response_model=ImageUploaded)
async def upload_image(
    request: Request,
    image_store: ImageStore = Depends(get_image_store),
) -> ImageUploaded:
    """Store a cover image and return its reference for later use."""
    parsed = await read_book_request(request)
    if parsed.image is None:
        raise InvalidRequestShape("No image file provided")
    image_url = await image_store.save_upload(parsed.image)
    return ImageUploaded(message="Image uploaded successfully", image_url=image_url)


@router.get("", response_model=BookList)
async def list_books(
    repository: BookRepository = Depends(get_book_repository),
) -> BookList:
    """List all books."""
    count, books = await run_in_threadpool(repository.list_all)
    return BookList(count=count, data=books)


@router.get("/isbn/{isbn}", response_model=Book)
async def get_book_by_isbn(
    isbn: str,
    repository: BookRepository = Depends(get_book_repository),
) -> Book:
    """Get a book by its exact ISBN."""
    return await run_in_threadpool(repository.get_by_isbn, isbn)


@router.get("/{book_id}", response_model=Book)
async def get_book(
    book_id: str,
    repository: BookRepository = Depends(get_book_repository),
) -> Book:
    """Get a book by ID."""
    canonical_id = validate_identifier(book_id)
    return await run_in_threadpool(repository.get_by_id, canonical_id)


@router.post("", response_model=Book, status_code=status.HTTP_201_CREATED)
async def create_book(
    request: Request,
    repository: BookRepository = Depends(get_book_repository),
    image_store: ImageStore = Depends(get_image_store),
) -> Book:
    """Create a new book, with an optional ``image`` part."""
    parsed = await read_book_request(request)
    validate_create(parsed.fields)
    fields, uploaded = await _resolve_fields(parsed, image_store)
    return await _write_with_upload(image_store, uploaded, repository.create, fields)


@router.put("/{book_id}", response_model=BookUpdated)
async def update_book(
    book_id: str,
    request: Request,
    repository: BookRepository = Depends(get_book_repository),
    image_store: ImageStore = Depends(get_image_store),
) -> BookUpdated:
    """Update any subset of a book's fields, with an optional new ``image``."""
    canonical_id = validate_identifier(book_id)
    parsed = await read_book_request(request)
    if parsed.image is None:
        validate_update(parsed.fields)
    fields, uploaded = await _resolve_fields(parsed, image_store)
    book = await _write_with_upload(
        image_store, uploaded, repository.update, canonical_id, fields
    )
    return BookUpdated(message="Book updated successfully", book=book)


@router.delete("/{book_id}", response_model=BookDeleted)
async def delete_book(
    book_id: str,
    repository: BookRepository = Depends(get_book_repository),
) -> BookDeleted:
    """Delete a book and its cover image."""
    canonical_id = validate_identifier(book_id)
    book = await run_in_threadpool(repository.delete, canonical_id)
    return BookDeleted(message="Book deleted successfully", deleted_book=book)
