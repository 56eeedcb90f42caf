"""Entity: Book."""

from typing import Any

from pydantic import Field

from src.app.entities.core._base import Entity


class Book(Entity):
    """Book entity as returned by the catalog API.

    Serialized with camelCase names (``publishYear``, ``imageUrl``,
    ``createdAt``...). ``image_url`` is empty when the book has no cover.
    """

    title: str = Field(description="Title")
    author: str = Field(description="Author")
    summary: str = Field(description="Short summary")
    publish_year: int = Field(description="Year of publication")
    isbn: str = Field(description="ISBN-10 or ISBN-13, unique across the catalog")
    image_url: str = Field(default="", description="Reference path of the cover image")

    def __eq__(self, other: Any) -> bool:
        """Compare books by business attributes, ignoring timestamps."""
        if not isinstance(other, Book):
            return False

        return (
            self.id == other.id
            and self.title == other.title
            and self.author == other.author
            and self.summary == other.summary
            and self.publish_year == other.publish_year
            and self.isbn == other.isbn
            and self.image_url == other.image_url
        )

    def __hash__(self) -> int:
        """Hash based on business attributes, ignoring timestamps."""
        return hash((self.id, self.isbn))
