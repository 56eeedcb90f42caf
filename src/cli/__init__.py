"""Main CLI application module."""

import typer

from .server_commands import server_app

app = typer.Typer(
    help="Bookstore catalog API - server and database tools",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.add_typer(server_app, name="server")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
