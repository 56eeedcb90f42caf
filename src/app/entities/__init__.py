"""Entities organized by business concept.

Each entity has its own package containing:
- entity.py: API-facing model
- table.py: Database persistence model
- repository.py: Data access layer
- validation.py: Request and record checks
"""

from .service.book import Book, BookRepository, BookTable

__all__ = [
    "Book",
    "BookTable",
    "BookRepository",
]
