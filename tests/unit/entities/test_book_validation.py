"""Unit tests for Book request checks and the record schema."""

import uuid

import pytest

from src.app.core.errors import InvalidIdentifier, ValidationFailed
from src.app.entities.service.book.validation import (
    is_valid_isbn,
    validate_book_record,
    validate_create,
    validate_identifier,
    validate_update,
)


class TestValidateCreate:
    def test_complete_fields_pass(self, book_fields):
        validate_create(book_fields)

    def test_isbn_not_required_at_request_level(self, book_fields):
        del book_fields["isbn"]
        validate_create(book_fields)

    def test_reports_every_missing_field(self):
        with pytest.raises(ValidationFailed) as exc_info:
            validate_create({"title": "T"})
        assert exc_info.value.message == "Missing required fields: author, summary, publishYear"

    @pytest.mark.parametrize("blank", [None, "", "   "])
    def test_blank_values_count_as_missing(self, book_fields, blank):
        book_fields["author"] = blank
        with pytest.raises(ValidationFailed, match="Missing required fields: author"):
            validate_create(book_fields)


class TestValidateUpdate:
    @pytest.mark.parametrize(
        "fields",
        [
            {"title": "New"},
            {"publishYear": 1999},
            {"isbn": "9781234567897"},
            {"imageUrl": ""},
            {"imageUrl": None},
        ],
    )
    def test_any_recognized_field_is_enough(self, fields):
        validate_update(fields)

    @pytest.mark.parametrize("fields", [{}, {"publisher": "X"}, {"_id": "abc"}])
    def test_rejects_without_recognized_fields(self, fields):
        with pytest.raises(ValidationFailed, match="Provide at least one field to update"):
            validate_update(fields)


class TestValidateIdentifier:
    def test_returns_canonical_uuid(self):
        value = uuid.uuid4()
        assert validate_identifier(str(value)) == str(value)
        assert validate_identifier(value.hex) == str(value)
        assert validate_identifier(str(value).upper()) == str(value)

    @pytest.mark.parametrize("value", ["", "123", "not-a-uuid", "507f1f77bcf86cd799439011", None, 42])
    def test_rejects_malformed(self, value):
        with pytest.raises(InvalidIdentifier, match="Invalid book ID format"):
            validate_identifier(value)


class TestIsbnFormat:
    @pytest.mark.parametrize("isbn", ["123456789X", "123456789x", "1234567890", "9781234567897"])
    def test_valid(self, isbn):
        assert is_valid_isbn(isbn)

    @pytest.mark.parametrize(
        "isbn",
        ["12345", "X123456789", "12345678901", "978-1234567897", "123456789012X", " 1234567890", 1234567890],
    )
    def test_invalid(self, isbn):
        assert not is_valid_isbn(isbn)


class TestValidateBookRecord:
    def test_normalizes_record(self, book_fields):
        record = validate_book_record(book_fields)
        assert record == {**book_fields, "imageUrl": ""}

    def test_coerces_form_strings(self):
        record = validate_book_record(
            {
                "title": "T",
                "author": "A",
                "summary": "S",
                "publishYear": " 2020 ",
                "isbn": "123456789X",
                "imageUrl": "/images/a.png",
            }
        )
        assert record["publishYear"] == 2020
        assert record["imageUrl"] == "/images/a.png"

    def test_coerces_numeric_isbn(self, book_fields):
        book_fields["isbn"] = 1234567890
        assert validate_book_record(book_fields)["isbn"] == "1234567890"

    def test_rejects_bad_isbn(self, book_fields):
        book_fields["isbn"] = "12345"
        with pytest.raises(ValidationFailed, match="12345 is not a valid ISBN!"):
            validate_book_record(book_fields)

    def test_requires_isbn(self, book_fields):
        del book_fields["isbn"]
        with pytest.raises(ValidationFailed, match="isbn is required"):
            validate_book_record(book_fields)

    @pytest.mark.parametrize("year", ["soon", "20.5", True, 19.5, [2020]])
    def test_rejects_non_integer_year(self, book_fields, year):
        book_fields["publishYear"] = year
        with pytest.raises(ValidationFailed, match="publishYear must be an integer"):
            validate_book_record(book_fields)

    def test_reports_all_violations(self):
        with pytest.raises(ValidationFailed) as exc_info:
            validate_book_record({"title": "", "isbn": "bad"})
        message = exc_info.value.message
        for expected in (
            "title is required",
            "author is required",
            "summary is required",
            "publishYear is required",
            "bad is not a valid ISBN!",
        ):
            assert expected in message

    def test_rejects_structured_text(self, book_fields):
        book_fields["title"] = {"en": "T"}
        with pytest.raises(ValidationFailed, match="title must be text"):
            validate_book_record(book_fields)
