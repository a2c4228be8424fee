"""``buildservice`` command line.

    buildservice serve           Run the HTTP API
    buildservice createtables    Create the database tables and exit
    buildservice coverage        Turn `go test -cover` output on stdin into JSON
    buildservice name            Print the service name
    buildservice version         Print the service version
"""

from __future__ import annotations

import logging
import sys

import typer

from buildservice.config import SERVICE_NAME, SERVICE_VERSION, Settings

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="Build service: build metadata, coverage trends and dependency staleness.",
    no_args_is_help=True,
    pretty_exceptions_show_locals=False,
)


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Host to bind to"),
    port: int = typer.Option(3000, help="Port to listen on"),
    create_tables: bool = typer.Option(
        False, "--create-tables", help="Create missing tables before serving"
    ),
) -> None:
    """Run the HTTP API."""
    import uvicorn

    from buildservice.api.app import create_app

    settings = Settings.from_env()
    _setup_logging(settings.log_level)

    logger.info(f"Binding HTTP to {host}:{port}")
    uvicorn.run(
        create_app(settings=settings, create_tables=create_tables),
        host=host,
        port=port,
        log_level=settings.log_level.lower(),
    )


@app.command()
def createtables() -> None:
    """Create the builds, coverage and dependencies tables."""
    from sqlalchemy.exc import SQLAlchemyError

    from buildservice.db.session import init_db

    settings = Settings.from_env()
    _setup_logging(settings.log_level)

    logger.info("Creating tables")
    try:
        init_db(settings.database_url)
    except SQLAlchemyError as e:
        logger.error(f"Error creating tables: {e}")
        raise typer.Exit(code=1)
    logger.info("OK")


@app.command()
def coverage() -> None:
    """Read `go test -cover` output from stdin and print package coverage JSON."""
    from buildservice.core.coverage_parser import (
        CoverageParseError,
        parse_coverage,
        write_coverage,
    )

    try:
        coverages = parse_coverage(sys.stdin)
    except CoverageParseError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1)
    write_coverage(sys.stdout, coverages)


@app.command()
def name() -> None:
    """Print the service name."""
    typer.echo(SERVICE_NAME)


@app.command()
def version() -> None:
    """Print the service version."""
    typer.echo(SERVICE_VERSION)


if __name__ == "__main__":
    app()
