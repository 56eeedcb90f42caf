"""Data access for books."""

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from loguru import logger
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from src.app.core.errors import DuplicateIsbn, NotFound, StoreUnavailable, ValidationFailed
from src.app.core.services.storage.image_store import ImageStore
from src.app.entities.core._base import utcnow

from .entity import Book
from .table import BookTable
from .validation import (
    BOOK_FIELDS,
    validate_book_record,
    validate_identifier,
    validate_update,
)

# API field name -> table column
_COLUMNS = {
    "title": "title",
    "author": "author",
    "summary": "summary",
    "publishYear": "publish_year",
    "isbn": "isbn",
    "imageUrl": "image_url",
}


def _store_message(exc: SQLAlchemyError) -> str:
    # The DBAPI message, without the SQL statement SQLAlchemy appends
    return str(getattr(exc, "orig", None) or exc)


class BookRepository:
    """Data-access layer for books.

    Each write commits on its own. Store failures never escape as raw
    SQLAlchemy errors: they surface as ``DuplicateIsbn``, ``ValidationFailed``
    or ``StoreUnavailable``.
    """

    def __init__(self, session: Session, image_store: ImageStore | None = None) -> None:
        self._session = session
        self._image_store = image_store

    @contextmanager
    def _store_errors(self) -> Iterator[None]:
        try:
            yield
        except IntegrityError as exc:
            self._session.rollback()
            message = _store_message(exc)
            if "isbn" in message.lower():
                raise DuplicateIsbn() from exc
            raise ValidationFailed(message) from exc
        except SQLAlchemyError as exc:
            self._session.rollback()
            logger.opt(exception=exc).error("Store operation failed")
            raise StoreUnavailable(_store_message(exc)) from exc

    @staticmethod
    def _to_entity(row: BookTable) -> Book:
        return Book.model_validate(row.model_dump())

    def _get_row(self, book_id: str) -> BookTable:
        canonical_id = validate_identifier(book_id)
        with self._store_errors():
            row = self._session.get(BookTable, canonical_id)
        if row is None:
            raise NotFound()
        return row

    def _commit(self, row: BookTable) -> Book:
        with self._store_errors():
            self._session.add(row)
            self._session.commit()
            self._session.refresh(row)
        return self._to_entity(row)

    def list_all(self) -> tuple[int, list[Book]]:
        with self._store_errors():
            rows = self._session.exec(select(BookTable)).all()
        books = [self._to_entity(row) for row in rows]
        return len(books), books

    def get_by_id(self, book_id: str) -> Book:
        return self._to_entity(self._get_row(book_id))

    def get_by_isbn(self, isbn: str) -> Book:
        """Exact-match lookup; the ISBN is not normalized."""
        with self._store_errors():
            row = self._session.exec(
                select(BookTable).where(BookTable.isbn == isbn)
            ).first()
        if row is None:
            raise NotFound()
        return self._to_entity(row)

    def create(self, fields: Mapping[str, Any]) -> Book:
        record = validate_book_record({name: fields.get(name) for name in BOOK_FIELDS})
        row = BookTable(**{_COLUMNS[name]: value for name, value in record.items()})
        book = self._commit(row)
        logger.info("Created book {} (isbn {})", book.id, book.isbn)
        return book

    def update(self, book_id: str, fields: Mapping[str, Any]) -> Book:
        """Replace only the recognized fields present in ``fields``."""
        validate_update(fields)
        row = self._get_row(book_id)

        changes = {name: fields[name] for name in BOOK_FIELDS if name in fields}
        current = {name: getattr(row, column) for name, column in _COLUMNS.items()}
        record = validate_book_record({**current, **changes})

        for name in changes:
            setattr(row, _COLUMNS[name], record[name])
        row.updated_at = utcnow()

        book = self._commit(row)
        logger.info("Updated book {} fields {}", book.id, sorted(changes))
        return book

    def delete(self, book_id: str) -> Book:
        """Remove a book, then discard its cover image on a best-effort basis."""
        row = self._get_row(book_id)
        book = self._to_entity(row)
        with self._store_errors():
            self._session.delete(row)
            self._session.commit()
        logger.info("Deleted book {}", book.id)

        if book.image_url:
            self._discard_image(book.image_url)
        return book

    def _discard_image(self, reference: str) -> None:
        if self._image_store is None:
            logger.warning("No image store configured; leaving image {} in place", reference)
            return
        try:
            removed = self._image_store.delete(reference)
        except Exception as exc:
            logger.warning("Could not delete image {}: {}", reference, exc)
            return
        if not removed:
            logger.info("Image {} was not present on disk", reference)
