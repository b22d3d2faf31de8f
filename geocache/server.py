import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import timedelta
from logging.handlers import RotatingFileHandler
from pathlib import Path

from fastmcp import FastMCP

from geocache.cache.eviction import EvictionPolicy
from geocache.cache.store import InMemoryCacheStore
from geocache.clients.geocoding import GeocodingClient
from geocache.keys import GEOCODING_CACHE, REVERSE_GEOCODING_CACHE
from geocache.service import GeocodingService

logger = logging.getLogger(__name__)

_service: GeocodingService | None = None


def get_service() -> GeocodingService:
    """Get the current GeocodingService instance. Raises if not initialized."""
    if _service is None:
        raise RuntimeError("Geocoding service not initialized. Server lifespan has not started.")
    return _service


def _reset_service() -> None:
    """Clear the module-level service reference. Used in tests."""
    global _service  # noqa: PLW0603
    _service = None


def build_service() -> GeocodingService:
    """Construct the store, provider client and service from settings."""
    from geocache.config import get_settings

    settings = get_settings()
    policy = EvictionPolicy(
        max_entries=settings.cache_max_entries,
        time_to_live=timedelta(seconds=settings.cache_ttl_seconds),
    )
    store = InMemoryCacheStore([GEOCODING_CACHE, REVERSE_GEOCODING_CACHE])
    client = GeocodingClient(
        settings.geocoding_api_key,
        geocoding_url=settings.geocoding_url,
        reverse_geocoding_url=settings.reverse_geocoding_url,
        timeout=settings.geocoding_timeout_seconds,
    )
    return GeocodingService(
        client, store, policy, bypass_token=settings.cache_bypass_token
    )


@asynccontextmanager
async def app_lifespan(server: FastMCP) -> AsyncIterator[dict]:
    """Create the cached geocoding service for the server lifecycle."""
    global _service  # noqa: PLW0603

    _service = build_service()
    logger.info(
        "Geocoding caches initialized (max_entries=%d, ttl=%s)",
        _service.policy.max_entries, _service.policy.time_to_live,
    )
    try:
        yield {"service": _service}
    finally:
        _service = None
        logger.info("Geocoding caches released")


mcp = FastMCP("geocache", lifespan=app_lifespan)


def setup_logging(log_level: str, data_dir: Path) -> None:
    """Configure logging with file rotation and console output.

    Args:
        log_level: Logging level string (DEBUG, INFO, WARNING, ERROR).
        data_dir: Base data directory. Logs go to data_dir/logs/server.log.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Exact type check so FileHandler subclasses do not count
    if not any(type(h) is logging.StreamHandler for h in root_logger.handlers):
        console = logging.StreamHandler()
        console.setLevel(level)
        console.setFormatter(formatter)
        root_logger.addHandler(console)

    log_dir = data_dir / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "server.log"

    if not any(isinstance(h, RotatingFileHandler) for h in root_logger.handlers):
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=5 * 1024 * 1024,  # 5 MB
            backupCount=3,
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def initialize() -> FastMCP:
    """Set up directories, logging, and register tools. Returns the MCP server."""
    from geocache.config import get_settings

    settings = get_settings()

    settings.data_dir.mkdir(parents=True, exist_ok=True)
    (settings.data_dir / "logs").mkdir(exist_ok=True)

    setup_logging(settings.log_level, settings.data_dir)

    from geocache.tools.geocoding import register_geocoding_tools

    register_geocoding_tools(mcp)

    logger.info("Geocoding MCP server initialized")
    return mcp
