"""Main entry point for the tierlookup application.

Sets up the Typer CLI application, performs dependency injection (Composition Root),
defines CLI commands, and delegates execution to the CommandHandler.
"""

import asyncio
import logging
import sys
from typing import Annotated, Any, Awaitable, Callable, Dict, Optional

import httpx
import typer

from tierlookup import __version__

# --- Core Layer ---
from tierlookup.core.command_handler import CommandHandler
from tierlookup.core.services.lookup_service import LookupService
from tierlookup.core.services.profile_shaper import ProfileShaper

# --- Infrastructure Layer ---
# Config
from tierlookup.infrastructure.config.settings import (
    get_api_base_url, get_avatar_dir, get_backoff_settings, get_cache_dir, get_cache_ttl_seconds,
    get_config, get_min_request_interval, get_profile_base_url, load_configuration, set_config,
)
# UI
from tierlookup.infrastructure.cli.display import ConsoleDisplay
# Cache
from tierlookup.infrastructure.cache.caching_service import TwoTierCache
from tierlookup.infrastructure.cache.file_store import FileStore
# Resilience
from tierlookup.infrastructure.resilience.api_retry import BackoffFetcher
from tierlookup.infrastructure.resilience.rate_limiter import RequestScheduler
# Remote API and side effects
from tierlookup.infrastructure.api.mctiers_client import MCTiersClient
from tierlookup.infrastructure.avatar.avatar_prefetcher import AvatarPrefetcher
# Monitoring
from tierlookup.infrastructure.monitoring.logger_setup import setup_logging

logger = logging.getLogger(__name__)


def create_http_client(timeout: float) -> httpx.AsyncClient:
    """Builds the shared HTTP client for API and avatar requests."""
    return httpx.AsyncClient(
        timeout=timeout,
        follow_redirects=True,
        headers={"User-Agent": f"tierlookup/{__version__}"},
    )


# --- Dependency Injection Container (Manual) ---

def create_dependencies() -> Dict[str, Any]:
    """Creates and wires up all dependencies for one command run.

    This acts as the Composition Root. It must run inside the event loop
    that will use the HTTP client.
    """
    load_configuration()
    log_level_name = str(get_config('logging.level')).upper()
    setup_logging(
        log_level=getattr(logging, log_level_name, logging.WARNING),
        log_file=get_config('logging.file'),
        log_format=get_config('logging.format'),
    )
    logger.info("Initializing application dependencies...")

    dependencies: Dict[str, Any] = {}

    # 1. Infrastructure Adapters & Services
    dependencies['ui'] = ConsoleDisplay()
    dependencies['http_client'] = create_http_client(float(get_config('api.timeout_seconds')))
    dependencies['cache_service'] = TwoTierCache(
        store=FileStore(get_cache_dir()),
        ttl=get_cache_ttl_seconds(),
    )
    dependencies['scheduler'] = RequestScheduler(min_interval=get_min_request_interval())
    dependencies['fetcher'] = BackoffFetcher(dependencies['http_client'], **get_backoff_settings())
    dependencies['profile_api'] = MCTiersClient(dependencies['fetcher'], base_url=get_api_base_url())
    dependencies['avatar_prefetcher'] = AvatarPrefetcher(
        dependencies['http_client'],
        cache_dir=get_avatar_dir(),
        base_url=str(get_config('avatar.base_url')),
        size=int(get_config('avatar.size')),
    )
    dependencies['profile_shaper'] = ProfileShaper(
        profile_base_url=get_profile_base_url(),
        avatar_base_url=str(get_config('avatar.base_url')),
        avatar_size=int(get_config('avatar.size')),
    )

    # 2. Core Services
    dependencies['lookup_service'] = LookupService(
        cache_service=dependencies['cache_service'],
        scheduler=dependencies['scheduler'],
        profile_api=dependencies['profile_api'],
        shaper=dependencies['profile_shaper'],
        avatar_warmer=dependencies['avatar_prefetcher'],
    )

    # 3. Command Handler
    dependencies['command_handler'] = CommandHandler(
        lookup_service=dependencies['lookup_service'],
        avatar_warmer=dependencies['avatar_prefetcher'],
        cache_service=dependencies['cache_service'],
        ui=dependencies['ui'],
    )
    logger.info("All dependencies initialized successfully.")
    return dependencies


# --- Typer App Definition ---
app = typer.Typer(
    name="tierlookup",
    help="tierlookup: cached, rate-limited MCTiers player lookups.",
    add_completion=False,
)


# --- Helper for Running Async Commands ---

async def _execute(action: Callable[[CommandHandler], Awaitable[bool]]) -> bool:
    dependencies = create_dependencies()
    handler: CommandHandler = dependencies['command_handler']
    try:
        return await action(handler)
    finally:
        await handler.shutdown()
        await dependencies['http_client'].aclose()


def run_command(action: Callable[[CommandHandler], Awaitable[bool]]) -> None:
    """Runs one async command and exits with status 1 if it reports failure."""
    try:
        succeeded = asyncio.run(_execute(action))
    except OSError as e:
        logger.error(f"Command failed: {e}", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        raise typer.Exit(code=1)
    if not succeeded:
        raise typer.Exit(code=1)


# --- CLI Commands ---

@app.command()
def lookup(
    name: Annotated[str, typer.Argument(help="Player name or UUID.")],
    as_json: Annotated[bool, typer.Option("--json", help="Print the raw response as JSON.")] = False,
):
    """Look up a player's MCTiers profile."""
    run_command(lambda handler: handler.handle_lookup_command(name, as_json=as_json))


@app.command()
def message(
    raw_message: Annotated[str, typer.Argument(metavar="JSON", help="One inbound message, e.g. '{\"type\": \"LOOKUP_PLAYER\", \"name\": \"Notch\"}'.")],
):
    """Handle one raw UI message and print the response."""
    run_command(lambda handler: handler.handle_message_command(raw_message))


@app.command(name="prefetch-avatar")
def prefetch_avatar_command(
    player_id: Annotated[str, typer.Argument(metavar="ID", help="Player UUID.")],
    image_url: Annotated[Optional[str], typer.Option("--image-url", help="Avatar URL to warm instead of the default.")] = None,
):
    """Warm a player's avatar into the local image cache."""
    async def action(handler: CommandHandler) -> bool:
        handler.handle_prefetch_avatar(player_id, image_url)
        return True

    run_command(action)


@app.command(name="clear-cache")
def clear_cache_command(
    level: Annotated[str, typer.Option(help="Level ('l1', 'l2', 'all').")] = 'all'
):
    """Clears the lookup cache."""
    run_command(lambda handler: handler.handle_clear_cache(level))


@app.callback()
def main_callback(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """Cached, rate-limited MCTiers player lookups."""
    if verbose:
        set_config('logging.level', 'DEBUG')


# --- Main Execution Guard ---

def cli_entry_point():
    """Function to be called by the script entry point in pyproject.toml."""
    app()


if __name__ == "__main__":
    cli_entry_point()
