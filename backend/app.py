"""FastAPI application entry point for the comics API."""

import logging
import sys

import httpx
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from errors import register_error_handlers
from services.cache import TTLCache
from services.fetcher import XKCDFetcher
from services.xkcd import XKCDService

# Structured logging: JSON for production, human-readable for local
if settings.is_production:
    logging.basicConfig(
        level=settings.log_level,
        format='{"time":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}',
        stream=sys.stdout,
    )
else:
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")

logger = logging.getLogger(__name__)


def build_http_client(transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
    """Outbound client for the xkcd API; redirects are followed (http -> https)."""
    return httpx.AsyncClient(timeout=settings.request_timeout, follow_redirects=True, transport=transport)


def build_service(client: httpx.AsyncClient) -> XKCDService:
    """Wire fetcher, cache and service from settings. One per process."""
    return XKCDService(
        fetcher=XKCDFetcher(client, base_url=settings.xkcd_base_url),
        cache=TTLCache(max_entries=settings.cache_max_entries),
        search_concurrency=settings.search_concurrency,
        simulated_latency=settings.simulated_latency_ms / 1000,
    )


def create_app(service: XKCDService | None = None) -> FastAPI:
    app = FastAPI(title="Comics API", version="1.0.0")

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Security headers
    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response

    # Centralized error handlers
    register_error_handlers(app)

    from routes.comics import router as comics_router
    from routes.health import router as health_router

    app.include_router(health_router)
    app.include_router(comics_router)

    client: httpx.AsyncClient | None = None
    if service is None:
        client = build_http_client()
        service = build_service(client)
    app.state.xkcd = service

    @app.on_event("startup")
    async def _validate_config() -> None:
        problems = settings.validate()
        if problems:
            logger.warning("Configuration problems: %s", "; ".join(problems))

    @app.on_event("shutdown")
    async def _close_client() -> None:
        if client is not None:
            await client.aclose()

    return app


app = create_app()
