"""Database engine and session factory used across the application."""

from typing import Any

from loguru import logger
from sqlalchemy import StaticPool, text
from sqlalchemy.engine import Engine
from sqlmodel import Session, create_engine

from src.app.runtime.config.config_data import DatabaseConfig
from src.app.runtime.context import get_config


class DbSessionService:
    def __init__(self, db_config: DatabaseConfig | None = None):
        """Initialize the shared database engine and session factory."""
        main_config = get_config()
        db_config = db_config or main_config.database
        self._config = db_config

        logger.info(
            "Configuring database engine for environment: {}",
            main_config.app.environment,
        )
        engine_kwargs: dict[str, Any] = {
            "echo": db_config.echo,
            "pool_pre_ping": True,
            "connect_args": self._get_connect_args(db_config),
        }

        if db_config.is_sqlite:
            if self._is_memory(db_config.url):
                # One shared connection, otherwise every session sees an empty database
                engine_kwargs["poolclass"] = StaticPool
        else:
            engine_kwargs.update(
                {
                    "pool_size": db_config.pool_size,
                    "max_overflow": db_config.max_overflow,
                    "pool_timeout": db_config.pool_timeout,
                    "pool_recycle": db_config.pool_recycle,
                }
            )

        self._engine = create_engine(db_config.connection_string, **engine_kwargs)

        if main_config.app.environment == "production":
            logger.info(
                "Database engine initialized",
                pool_size=db_config.pool_size,
                max_overflow=db_config.max_overflow,
            )

    @staticmethod
    def _is_memory(url: str) -> bool:
        return url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url

    def _get_connect_args(self, db_config: DatabaseConfig) -> dict:
        """Get database-specific connection arguments."""
        connect_args: dict[str, Any] = {}

        if db_config.url.startswith("postgresql"):
            connect_args.update(
                {
                    "application_name": get_config().app.name,
                    "connect_timeout": 30,
                }
            )
        elif db_config.is_sqlite:
            connect_args.update(
                {
                    # Sessions are used from FastAPI's worker threads
                    "check_same_thread": False,
                    "timeout": 20,
                }
            )
            if get_config().app.environment == "production":
                logger.warning(
                    "SQLite is not recommended for production use. "
                    "Consider PostgreSQL for better reliability."
                )

        return connect_args

    @property
    def engine(self) -> Engine:
        return self._engine

    def get_session(self) -> Session:
        """Return a new SQLModel session bound to the shared engine."""
        return Session(self._engine, expire_on_commit=False, autoflush=True)

    def health_check(self) -> bool:
        """Perform a health check on the database connection."""
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
                return True
        except Exception as e:
            logger.error(
                "Database health check failed",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return False

    def dispose(self) -> None:
        self._engine.dispose()
