"""Schema management for the catalog database."""

from loguru import logger
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel


class DbManageService:
    def __init__(self, engine: Engine):
        self._engine = engine

    def create_all(self) -> None:
        """Create all database tables that do not exist yet."""
        from src.app.entities.service.book import BookTable  # noqa: F401

        SQLModel.metadata.create_all(self._engine)
        logger.info("Database initialized with tables: {}", sorted(SQLModel.metadata.tables))

    def drop_all(self) -> None:
        from src.app.entities.service.book import BookTable  # noqa: F401

        SQLModel.metadata.drop_all(self._engine)
        logger.warning("Dropped all catalog tables")
