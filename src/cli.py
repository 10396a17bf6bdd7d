"""
Command-line interface for stream-feed.

Provides commands to run the API server, initialize the database and
inspect feeds without going through HTTP.

Usage:
    stream-feed serve             # Run the API server
    stream-feed init-db           # Initialize database
    stream-feed bootstrap         # Create a user and print its tokens
    stream-feed feed USER_ID      # Build a user's feed once and print it
    stream-feed maintenance --on  # Toggle maintenance mode
    stream-feed health            # Check service health
"""

import asyncio
import json
import sys

import click

from src.config.settings import get_settings
from src.observability.logging import setup_logging
from src.observability.metrics import get_metrics


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool) -> None:
    """Stream Feed - Multi-platform live channel aggregation."""
    setup_logging("DEBUG" if debug else None)

    # Initialize tracing if enabled
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
    from src.admin.repository import FlagsRepository
    from src.cache.postgres import PostgresCacheStore
    from src.sources.repository import SourcesRepository
    from src.storage.database import Database
    from src.users.repository import UsersRepository

    async def run():
        db = Database()
        await db.connect()

        try:
            await UsersRepository(db).create_table()
            await SourcesRepository(db).create_table()
            await FlagsRepository(db).create_table()
            await PostgresCacheStore(db).create_table()
            click.echo("Database initialized successfully")
        finally:
            await db.close()

    asyncio.run(run())


@main.command()
def bootstrap() -> None:
    """Create a user and print its id and tokens."""
    from src.storage.database import Database
    from src.users.repository import UsersRepository

    async def run():
        db = Database()
        await db.connect()

        try:
            user = await UsersRepository(db).create_user()
        finally:
            await db.close()

        click.echo(f"User ID:     {user.user_id}")
        click.echo(f"Owner token: {user.owner_token}")
        click.echo(f"Read token:  {user.read_token}")

    asyncio.run(run())


@main.command()
@click.argument("user_id")
@click.option("--fresh", is_flag=True, help="Ignore the cached whole feed")
def feed(user_id: str, fresh: bool) -> None:
    """Build USER_ID's feed once and print it as JSON."""
    from src.cache.base import feed_cache_key
    from src.cache.factory import create_cache_store
    from src.feed.aggregator import FeedAggregator
    from src.feed.config import FeedConfig
    from src.feed.factory import build_adapters, create_http_client
    from src.sources.repository import SourcesRepository
    from src.storage.database import Database

    async def run():
        settings = get_settings()
        config = FeedConfig()
        db = Database()
        await db.connect()
        cache = create_cache_store(settings, database=db)

        try:
            async with create_http_client(settings) as http:
                aggregator = FeedAggregator(
                    cache=cache,
                    sources=SourcesRepository(db),
                    adapters=build_adapters(http, cache, settings, config),
                    config=config,
                )
                if fresh:
                    await cache.delete(feed_cache_key(user_id))
                response = await aggregator.get_feed(user_id)
        finally:
            await cache.close()
            await db.close()

        click.echo(json.dumps(response.to_json(), indent=2, ensure_ascii=False))
        if response.errors:
            click.echo(
                click.style(f"{len(response.errors)} source(s) failed", fg="yellow"),
                err=True,
            )

    asyncio.run(run())


@main.command()
@click.option("--on/--off", "enabled", required=True, help="Enable or disable maintenance mode")
def maintenance(enabled: bool) -> None:
    """Set or clear the maintenance flag."""
    from src.admin.repository import MAINTENANCE_FLAG, FlagsRepository
    from src.storage.database import Database

    async def run():
        db = Database()
        await db.connect()

        try:
            await FlagsRepository(db).set_flag(MAINTENANCE_FLAG, enabled)
        finally:
            await db.close()

        click.echo(f"Maintenance mode {'enabled' if enabled else 'disabled'}")

    asyncio.run(run())


@main.command()
def health() -> None:
    """Probe Postgres and the cache backend, and report platform credentials."""
    import structlog

    from src.admin.repository import MAINTENANCE_FLAG, FlagsRepository
    from src.cache.factory import create_cache_store
    from src.storage.database import Database

    logger = structlog.get_logger(__name__)

    async def check() -> dict[str, bool]:
        settings = get_settings()
        results: dict[str, bool] = {}
        db = Database()

        try:
            await db.connect()
            results["postgres"] = await db.health_check()
        except Exception as e:
            results["postgres"] = False
            logger.error("Postgres health check failed", error=str(e))

        if results["postgres"]:
            results["maintenance_off"] = not await FlagsRepository(db).get_flag(MAINTENANCE_FLAG)
            try:
                cache = create_cache_store(settings, database=db)
                await cache.read("health:probe")
                await cache.close()
                results[f"cache ({settings.cache_backend})"] = True
            except Exception as e:
                results[f"cache ({settings.cache_backend})"] = False
                logger.error("Cache health check failed", backend=settings.cache_backend, error=str(e))

        await db.close()
        results["youtube_configured"] = settings.youtube_configured
        results["twitch_configured"] = settings.twitch_configured
        return results

    results = asyncio.run(check())

    click.echo("\nHealth Check Results:")
    click.echo("-" * 40)
    for name, ok in results.items():
        click.echo(click.style(f"  {'✓' if ok else '✗'} {name}", fg="green" if ok else "red"))
    click.echo("-" * 40)

    core = [ok for name, ok in results.items() if name == "postgres" or name.startswith("cache")]
    if core and all(core):
        click.echo(click.style("All core services healthy!", fg="green"))
        return
    click.echo(click.style("Some services unhealthy!", fg="red"))
    sys.exit(1)


@main.command()
@click.option("--host", default=None, help="API server host")
@click.option("--port", default=None, type=int, help="API server port")
@click.option("--reload", is_flag=True, help="Enable auto-reload (dev only)")
@click.option("--metrics-port", default=None, type=int, help="Metrics server port")
def serve(host: str | None, port: int | None, reload: bool, metrics_port: int | None) -> None:
    """Start the stream feed API server."""
    import uvicorn

    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port
    metrics_port = metrics_port or settings.metrics_port

    # Start metrics server on separate port
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
