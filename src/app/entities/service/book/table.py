"""Book database table model."""

from sqlmodel import Field

from src.app.entities.core._base import EntityTable


class BookTable(EntityTable, table=True):
    """Database persistence model for books.

    The unique index on ``isbn`` is what settles concurrent creates with the
    same ISBN: exactly one insert wins.
    """

    __tablename__ = "books"

    title: str
    author: str
    summary: str
    publish_year: int
    isbn: str = Field(unique=True, index=True)
    image_url: str = Field(default="")
