"""
StreamWaves Main Application

FastAPI application entry point for the IPTV proxy and stream relay.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import httpx
from fastapi import FastAPI

from streamwaves import __version__
from streamwaves.cache import CacheConfig, MemoryCache
from streamwaves.config import StreamWavesConfig, load_config
from streamwaves.middleware import RequestLoggingMiddleware
from streamwaves.streaming import DNSResolver, IPTVQueryProxy, StreamRelay

# Logger
logger = logging.getLogger(__name__)


def create_app(
    config: Optional[StreamWavesConfig] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    dns_resolver: Optional[DNSResolver] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Configuration to use. Loaded from disk/environment if omitted.
        transport: httpx transport for outbound requests (tests pass a mock).
        dns_resolver: Resolver for custom DNS lookups.

    Returns:
        Configured FastAPI application instance.
    """
    if config is None:
        config = load_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """
        Application lifespan manager.

        Builds the cache, outbound HTTP clients, resolver, proxy and relay
        on startup and releases them on shutdown.
        """
        logger.info(f"Starting StreamWaves v{__version__}")
        logger.info(
            f"Environment: {config.server.environment}, "
            f"public origin: {config.server.public_origin}"
        )

        cache = MemoryCache(
            CacheConfig(
                default_ttl=config.cache.ttl_seconds,
                cleanup_interval=config.cache.cleanup_interval_seconds,
                enable_stats=config.cache.enable_stats,
            )
        )
        await cache.start()
        logger.info(f"Response cache started (ttl={config.cache.ttl_seconds}s)")

        api_client = httpx.AsyncClient(
            transport=transport,
            timeout=config.proxy.timeout_seconds,
        )
        stream_client = httpx.AsyncClient(
            transport=transport,
            timeout=config.stream.timeout_seconds,
            max_redirects=config.stream.max_redirects,
        )

        resolver = dns_resolver or DNSResolver(timeout=config.dns.timeout_seconds)

        app.state.cache = cache
        app.state.iptv_proxy = IPTVQueryProxy(
            client=api_client,
            cache=cache,
            resolver=resolver,
            config=config.proxy,
            cache_ttl=config.cache.ttl_seconds,
        )
        app.state.stream_relay = StreamRelay(
            client=stream_client,
            config=config.stream,
            public_origin=config.server.public_origin,
        )

        logger.info("StreamWaves started successfully")

        yield

        logger.info("Shutting down StreamWaves")

        try:
            await api_client.aclose()
            await stream_client.aclose()
            logger.info("HTTP clients closed")
        except Exception as e:
            logger.warning(f"Error closing HTTP clients: {e}")

        await cache.stop()
        logger.info(f"Response cache stopped, stats: {cache.get_stats().to_dict()}")

        logger.info("StreamWaves shutdown complete")

    app = FastAPI(
        title="StreamWaves",
        description="IPTV API proxy and stream relay",
        version=__version__,
        lifespan=lifespan,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )
    app.state.config = config

    app.add_middleware(
        RequestLoggingMiddleware,
        slow_request_threshold_ms=config.logging.slow_request_threshold_ms,
    )

    # Register API routers
    from streamwaves.api import api_router
    app.include_router(api_router)

    return app


def main() -> None:
    """
    Main entry point for running the server.

    Called via the `streamwaves` console script.
    """
    import uvicorn
    from streamwaves.utils.logging_setup import parse_size, setup_logging

    config = load_config()

    setup_logging(
        log_level=config.logging.level,
        log_file_name=config.logging.file,
        log_to_console=True,
        log_to_file=config.logging.log_to_file,
        max_bytes=parse_size(config.logging.max_size),
        backup_count=config.logging.backup_count,
        log_format=config.logging.format,
    )

    logger.info(f"Proxy server running on port {config.server.port}")

    uvicorn.run(
        "streamwaves.main:create_app",
        factory=True,
        host=config.server.host,
        port=config.server.port,
        reload=config.server.debug,
        log_level=config.server.log_level.lower(),
    )


if __name__ == "__main__":
    main()
