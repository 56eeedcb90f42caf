"""Server and database CLI commands."""

import typer
from rich.console import Console
from rich.panel import Panel

from src.app.runtime.context import get_config

console = Console()

server_app = typer.Typer(help="Run the API and manage its database")


@server_app.command(name="start")
def start_server(
    host: str | None = typer.Option(None, help="Host to bind (default: config app.host)"),
    port: int | None = typer.Option(None, help="Port to bind (default: config app.port)"),
    reload: bool = typer.Option(False, help="Enable auto-reload on code changes"),
) -> None:
    """Start the API server with uvicorn."""
    import uvicorn

    config = get_config()
    host = host or config.app.host
    port = port or config.app.port

    console.print(
        Panel.fit(
            f"[bold green]Bookstore Catalog API[/bold green] on http://{host}:{port}",
            border_style="green",
        )
    )
    uvicorn.run(
        "src.app.api.http.app:app",
        host=host,
        port=port,
        reload=reload,
        reload_dirs=["src"] if reload else None,
        log_config=None,
    )


@server_app.command(name="init-db")
def init_db() -> None:
    """Create the catalog tables if they do not exist."""
    from src.app.runtime.init_db import init_db as create_tables

    create_tables()
    console.print("[green]Database tables created[/green]")
