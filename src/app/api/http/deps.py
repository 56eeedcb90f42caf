"""FastAPI dependency implementations."""

from __future__ import annotations

from collections.abc import Iterator

from fastapi import Depends, Request
from sqlmodel import Session

from src.app.api.http.app_data import ApplicationDependencies
from src.app.core.services import DbSessionService, ImageStore
from src.app.entities.service.book import BookRepository


def get_app_dependencies(request: Request) -> ApplicationDependencies:
    return request.app.state.app_dependencies


def get_database_service(request: Request) -> DbSessionService:
    """Get the database service instance."""
    return get_app_dependencies(request).database_service


def get_db_session(request: Request) -> Iterator[Session]:
    """Open a database session for the duration of one request."""
    session = get_database_service(request).get_session()
    try:
        yield session
    finally:
        session.close()


def get_image_store(request: Request) -> ImageStore:
    """Get the image store instance."""
    return get_app_dependencies(request).image_store


def get_book_repository(
    session: Session = Depends(get_db_session),
    image_store: ImageStore = Depends(get_image_store),
) -> BookRepository:
    return BookRepository(session, image_store)
