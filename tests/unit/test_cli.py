"""Tests for the command line entry points."""

import uvicorn
from sqlalchemy import create_engine, inspect
from typer.testing import CliRunner

from src.cli import app
from src.app.runtime.config.config_data import ConfigData, DatabaseConfig
from src.app.runtime.context import with_context

runner = CliRunner()


def test_init_db_creates_tables(tmp_path):
    database = tmp_path / "books.db"
    override = ConfigData(database=DatabaseConfig(url=f"sqlite:///{database}"))

    with with_context(override):
        result = runner.invoke(app, ["server", "init-db"])

    assert result.exit_code == 0, result.output
    engine = create_engine(f"sqlite:///{database}")
    try:
        assert "books" in inspect(engine).get_table_names()
    finally:
        engine.dispose()


def test_start_uses_configured_port(monkeypatch):
    calls = {}

    def fake_run(target, **kwargs):
        calls["target"] = target
        calls.update(kwargs)

    monkeypatch.setattr(uvicorn, "run", fake_run)
    override = ConfigData()
    override.app.port = 5555

    with with_context(override):
        result = runner.invoke(app, ["server", "start", "--host", "127.0.0.1"])

    assert result.exit_code == 0, result.output
    assert calls["target"] == "src.app.api.http.app:app"
    assert calls["host"] == "127.0.0.1"
    assert calls["port"] == 5555
    assert calls["log_config"] is None
