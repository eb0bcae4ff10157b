"""
Command-line interface for the userfeedback service.

Usage:
    userfeedback serve                  # Run the API server
    userfeedback init-db                # Create tables
    userfeedback health                 # Check database connectivity
    userfeedback rating-mode            # Show the local rating mode
    userfeedback rating-mode advanced   # Enable the feedback API
"""

import asyncio
import sys

import click

from src.config.settings import get_settings
from src.observability.logging import setup_logging
from src.observability.metrics import get_metrics
from src.system_settings.schemas import RatingsSetting


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool) -> None:
    """User Feedback - ratings and comments on catalog records."""
    if debug:
        import os
        os.environ["LOG_LEVEL"] = "DEBUG"
        get_settings.cache_clear()

    setup_logging()

    settings = get_settings()
    if settings.tracing_enabled:
        from src.observability.tracing import setup_tracing

        setup_tracing(
            service_name=settings.otel_service_name,
            otlp_endpoint=settings.otel_exporter_otlp_endpoint,
        )


@main.command("init-db")
def init_db() -> None:
    """Initialize the database schema."""
    from src.catalog.repository import CatalogRepository
    from src.storage.database import Database
    from src.system_settings.repository import SettingsRepository
    from src.userfeedback.repository import UserFeedbackRepository

    async def run():
        db = Database()
        await db.connect()
        try:
            await CatalogRepository(db).create_table()
            await SettingsRepository(db).create_table()
            await UserFeedbackRepository(db).create_table()
        finally:
            await db.close()

        click.echo("Database initialized successfully")

    asyncio.run(run())


@main.command()
def health() -> None:
    """Check health of the database."""
    import structlog
    logger = structlog.get_logger()

    async def check():
        from src.storage.database import Database

        healthy = False
        db = Database()
        try:
            await db.connect()
            healthy = await db.health_check()
        except Exception as e:
            logger.error("Postgres health check failed", error=str(e))
        finally:
            await db.close()

        click.echo("\nHealth Check Results:")
        click.echo("-" * 40)
        icon = "✓" if healthy else "✗"
        color = "green" if healthy else "red"
        click.echo(click.style(f"  {icon} postgres: {healthy}", fg=color))
        click.echo("-" * 40)

        if healthy:
            click.echo(click.style("All core services healthy!", fg="green"))
            sys.exit(0)
        else:
            click.echo(click.style("Some services unhealthy!", fg="red"))
            sys.exit(1)

    asyncio.run(check())


@main.command("rating-mode")
@click.argument(
    "mode",
    required=False,
    type=click.Choice([m.value for m in RatingsSetting], case_sensitive=False),
)
def rating_mode(mode: str | None) -> None:
    """Show or set the local rating mode (off, basic, advanced)."""
    from src.storage.database import Database
    from src.system_settings.service import SettingManager

    async def run():
        db = Database()
        await db.connect()
        try:
            manager = SettingManager(db)
            if mode is not None:
                await manager.set_rating_mode(RatingsSetting(mode.lower()))
                click.echo(f"Rating mode set to {mode.lower()}")
            else:
                current = await manager.get_rating_mode()
                click.echo(f"Rating mode: {current.value}")
        finally:
            await db.close()

    asyncio.run(run())


@main.command()
@click.option("--host", default=None, help="API server host")
@click.option("--port", default=None, type=int, help="API server port")
@click.option("--reload", is_flag=True, help="Enable auto-reload (dev only)")
@click.option("--metrics-port", default=None, type=int, help="Metrics server port")
def serve(host: str | None, port: int | None, reload: bool, metrics_port: int | None) -> None:
    """Start the user feedback API server."""
    import uvicorn

    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port
    metrics_port = metrics_port or settings.metrics_port

    get_metrics().start_server(port=metrics_port)

    click.echo(f"Starting API server on {host}:{port}")
    click.echo(f"Metrics available on http://localhost:{metrics_port}/metrics")
    click.echo(f"API docs available on http://localhost:{port}/docs")

    uvicorn.run(
        "src.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level="info",
    )


if __name__ == "__main__":
    main()
