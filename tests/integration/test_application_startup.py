"""Integration tests for application lifecycle and startup behavior."""

import pytest
from sqlalchemy import inspect

from src.app.runtime.config.config_data import ConfigData, DatabaseConfig, StorageConfig
from src.app.runtime.context import with_context


@pytest.fixture
def startup_config(tmp_path) -> ConfigData:
    return ConfigData(
        database=DatabaseConfig(url="sqlite://"),
        storage=StorageConfig(upload_dir=str(tmp_path / "public" / "images")),
    )


class TestApplicationStartup:
    """Test application startup and shutdown against a throwaway environment."""

    @pytest.mark.asyncio
    async def test_startup_creates_schema_and_image_directory(self, startup_config, tmp_path):
        import src.app.api.http.app as application

        previous = getattr(application.app.state, "app_dependencies", None)
        try:
            with with_context(config_override=startup_config):
                await application.startup()

            deps = application.app.state.app_dependencies
            assert (tmp_path / "public" / "images").is_dir()
            assert deps.image_store.directory == tmp_path / "public" / "images"
            assert "books" in inspect(deps.database_service.engine).get_table_names()
            assert deps.database_service.health_check()
        finally:
            await application.shutdown()
            application.app.state.app_dependencies = previous

    @pytest.mark.asyncio
    async def test_isbn_column_is_unique(self, startup_config):
        import src.app.api.http.app as application

        previous = getattr(application.app.state, "app_dependencies", None)
        try:
            with with_context(config_override=startup_config):
                await application.startup()

            engine = application.app.state.app_dependencies.database_service.engine
            indexes = inspect(engine).get_indexes("books")
            assert any(index["unique"] and index["column_names"] == ["isbn"] for index in indexes)
        finally:
            await application.shutdown()
            application.app.state.app_dependencies = previous

    @pytest.mark.asyncio
    async def test_shutdown_without_startup(self):
        import src.app.api.http.app as application

        previous = getattr(application.app.state, "app_dependencies", None)
        application.app.state.app_dependencies = None
        try:
            await application.shutdown()
        finally:
            application.app.state.app_dependencies = previous


class TestSchemaManagement:
    def test_drop_all_removes_tables(self, engine):
        from src.app.core.services import DbManageService

        service = DbManageService(engine)
        service.drop_all()
        assert "books" not in inspect(engine).get_table_names()

        service.create_all()
        assert "books" in inspect(engine).get_table_names()
