"""Book validation rules.

Two layers live here and stay independent of each other:

* request checks (``validate_create``, ``validate_update``,
  ``validate_identifier``) that only look at which fields are present, run by
  the HTTP handlers before any store call;
* the record schema (``validate_book_record``), run by the repository on the
  complete record before every insert or update. It is the only place the
  ISBN format is checked.

Field names are the API names (``publishYear``, ``imageUrl``).
"""

import re
import uuid
from collections.abc import Mapping
from typing import Any

from src.app.core.errors import InvalidIdentifier, ValidationFailed

ISBN_PATTERN = re.compile(r"^(?:\d{9}[\dXx]|\d{13})$")

REQUIRED_CREATE_FIELDS = ("title", "author", "summary", "publishYear")
BOOK_FIELDS = ("title", "author", "summary", "publishYear", "isbn", "imageUrl")
TEXT_FIELDS = ("title", "author", "summary")


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_create(fields: Mapping[str, Any]) -> None:
    """Require every create field, reporting all missing ones at once."""
    missing = [name for name in REQUIRED_CREATE_FIELDS if _is_blank(fields.get(name))]
    if missing:
        raise ValidationFailed(f"Missing required fields: {', '.join(missing)}")


def validate_update(fields: Mapping[str, Any]) -> None:
    """Require at least one recognized field; explicit nulls count as present."""
    if not any(name in fields for name in BOOK_FIELDS):
        raise ValidationFailed("Provide at least one field to update")


def validate_identifier(book_id: Any) -> str:
    """Return the canonical form of a book id, or raise ``InvalidIdentifier``."""
    if not isinstance(book_id, str):
        raise InvalidIdentifier()
    try:
        return str(uuid.UUID(book_id))
    except ValueError:
        raise InvalidIdentifier() from None


def is_valid_isbn(value: Any) -> bool:
    return isinstance(value, str) and ISBN_PATTERN.fullmatch(value) is not None


def _coerce_text(name: str, value: Any, errors: list[str]) -> str | None:
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        errors.append(f"{name} must be text")
        return None
    return str(value)


def _coerce_year(value: Any, errors: list[str]) -> int | None:
    if isinstance(value, bool):
        errors.append("publishYear must be an integer")
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    errors.append("publishYear must be an integer")
    return None


def validate_book_record(record: Mapping[str, Any]) -> dict[str, Any]:
    """Check a complete Book record and return it normalized.

    Form bodies deliver every value as a string, so numeric years and ISBNs
    sent as JSON numbers are coerced. An absent or null ``imageUrl`` becomes
    ``""``.

    Raises:
        ValidationFailed: listing every violated rule.
    """
    errors: list[str] = []
    clean: dict[str, Any] = {}

    for name in TEXT_FIELDS:
        value = record.get(name)
        if _is_blank(value):
            errors.append(f"{name} is required")
            continue
        clean[name] = _coerce_text(name, value, errors)

    year = record.get("publishYear")
    if _is_blank(year):
        errors.append("publishYear is required")
    else:
        clean["publishYear"] = _coerce_year(year, errors)

    isbn = record.get("isbn")
    if _is_blank(isbn):
        errors.append("isbn is required")
    else:
        isbn = _coerce_text("isbn", isbn, errors)
        if isbn is not None and not is_valid_isbn(isbn):
            errors.append(f"{isbn} is not a valid ISBN!")
        clean["isbn"] = isbn

    image_url = record.get("imageUrl")
    if image_url is None:
        clean["imageUrl"] = ""
    elif isinstance(image_url, str):
        clean["imageUrl"] = image_url
    else:
        errors.append("imageUrl must be text")

    if errors:
        raise ValidationFailed(f"Book validation failed: {', '.join(errors)}")
    return clean
