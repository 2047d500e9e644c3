"""Command-line interface for the Coddy public backend."""

import asyncio

import click

from coddy_public import __version__
from coddy_public.core.config import get_settings
from coddy_public.core.logging import configure_logging, get_logger


@click.group()
@click.version_option(version=__version__, prog_name="coddy-public")
def cli() -> None:
    """Coddy public backend: authentication for the Coddy platform."""


@cli.command()
@click.option("--host", type=str, default=None, help="Host to bind to (overrides config)")
@click.option("--port", type=int, default=None, help="Port to bind to (overrides config)")
@click.option(
    "--workers",
    type=int,
    default=None,
    help="Number of worker processes (overrides config)",
)
@click.option(
    "--reload",
    is_flag=True,
    default=False,
    help="Enable auto-reload for development",
)
def serve(host: str | None, port: int | None, workers: int | None, reload: bool) -> None:
    """Start the HTTP server."""
    import uvicorn

    settings = get_settings()

    bind_host = host or settings.host
    bind_port = port or settings.port
    bind_workers = workers or settings.workers

    configure_logging(settings)

    logger = get_logger(__name__)
    logger.info(
        "Starting server",
        host=bind_host,
        port=bind_port,
        workers=bind_workers,
        reload=reload,
        environment=settings.environment,
        debug=settings.debug,
    )

    uvicorn.run(
        "coddy_public.infrastructure.api.app:app",
        host=bind_host,
        port=bind_port,
        workers=1 if reload else bind_workers,
        reload=reload,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


@cli.command("init-db")
@click.option("--force", is_flag=True, help="Skip confirmation prompt")
def init_db(force: bool) -> None:
    """Create the users table.

    Production schemas are managed outside this service; this command is
    meant for local development.
    """
    from coddy_public.infrastructure.persistence.database import (
        close_database,
        get_db_manager,
        init_database,
    )
    from coddy_public.infrastructure.persistence.models import UserModel  # noqa: F401

    settings = get_settings()
    configure_logging(settings)

    if not settings.database_configured:
        raise click.ClickException("No database configured (set CODDY_DATABASE_URL).")

    if settings.is_production and not force:
        raise click.ClickException("Running in production mode. Use --force to continue.")

    async def _create() -> None:
        try:
            if settings.is_production:
                await get_db_manager().create_tables()
            else:
                await init_database()
        finally:
            await close_database()

    asyncio.run(_create())
    click.echo("Database initialized.")


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
