"""Command line interface for the full feed proxy."""

import asyncio
import sys
from contextlib import asynccontextmanager
from typing import AsyncIterator

import click
import structlog
from aiohttp import web

from full_feed.api import build_service, create_app
from full_feed.cache import create_cache_store
from full_feed.config import ProxyConfig
from full_feed.errors import FullFeedError
from full_feed.http_client import create_session
from full_feed.logging_config import configure_logging
from full_feed.service import FullFeedService

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def open_service(config: ProxyConfig) -> AsyncIterator[FullFeedService]:
    """Open a session and cache store and yield a wired service."""
    store = create_cache_store(config)
    session = create_session(config)
    try:
        yield build_service(session, store, config)
    finally:
        await session.close()
        await store.close()


def run_async(ctx: click.Context, coro) -> None:
    """Run a coroutine, exiting with status 1 on proxy errors."""
    try:
        asyncio.run(coro)
    except FullFeedError as e:
        logger.error("command_failed", error=e.message, category=e.category.value)
        click.echo(f"Error: {e.message}", err=True)
        ctx.exit(1)


@click.group()
@click.option("--log-level", default=None, help="Minimum log level (default from FULL_FEED_LOG_LEVEL).")
@click.option("--json-logs/--console-logs", default=None, help="Log as JSON lines or console text.")
@click.pass_context
def cli(ctx, log_level, json_logs):
    """Full Feed RSS: feeds with the full content of every article."""
    config = ProxyConfig.from_env()
    if log_level is not None:
        config.log_level = log_level
    if json_logs is not None:
        config.log_json = json_logs
    configure_logging(config.log_level, config.log_json)
    ctx.obj = config


@cli.command()
@click.option("--host", default=None, help="Interface to bind.")
@click.option("--port", type=int, default=None, help="Port to listen on.")
@click.pass_obj
def serve(config: ProxyConfig, host, port):
    """Run the HTTP proxy."""
    if host is not None:
        config.host = host
    if port is not None:
        config.port = port
    logger.info("server_starting", host=config.host, port=config.port)
    web.run_app(create_app(config), host=config.host, port=config.port, print=None)


@cli.command()
@click.argument("url")
@click.pass_context
def feed(ctx, url):
    """Print the full content feed for URL."""

    async def _run():
        async with open_service(ctx.obj) as service:
            document = await service.build(url)
        sys.stdout.buffer.write(document)
        sys.stdout.buffer.flush()

    run_async(ctx, _run())


@cli.command()
@click.argument("url")
@click.pass_context
def article(ctx, url):
    """Print the processed content of a single article."""

    async def _run():
        async with open_service(ctx.obj) as service:
            content = await service.processor.fetcher.fetch_content(url)
        click.echo(content)

    run_async(ctx, _run())
