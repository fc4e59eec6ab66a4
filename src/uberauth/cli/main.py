"""Command-line interface for uberauth."""

import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from uberauth.cli.auth import auth_app


def _setup_logging(verbose: bool = False) -> None:
    """Configure logging with Rich handler."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )
    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("aiohttp").setLevel(logging.WARNING)


app = typer.Typer(
    name="uberauth",
    help="Log in with Uber using the OAuth 2.0 authorization code flow.",
)
app.add_typer(auth_app)


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose logging.",
        ),
    ] = False,
) -> None:
    _setup_logging(verbose)


if __name__ == "__main__":
    app()
