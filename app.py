"""FastAPI application factory."""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.handlers import (
    handle_health,
    handle_proxy,
    handle_services,
    internal_error,
    not_found,
)
from api.middleware import (
    RateLimitMiddleware,
    RequestLogMiddleware,
    ResponseCacheMiddleware,
    SecurityHeadersMiddleware,
)
from core.config import Config
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from core.redact import Redactor
from core.registry import ServiceRegistry
from services.routing_service import RoutingService
from services.upstream import UpstreamClient

VERSION = "1.0.0"
SERVICES_PATH = "/api/proxy/services"


def create_app(
    config: Config,
    logger: RequestLogger,
    registry: ServiceRegistry,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``transport`` replaces the network transport of the upstream client.
    """
    redactor = Redactor(registry.secrets())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        limits = httpx.Limits(
            max_connections=config.upstream.max_connections,
            max_keepalive_connections=config.upstream.max_keepalive_connections,
        )
        client = httpx.AsyncClient(
            timeout=config.upstream.timeout,
            limits=limits,
            transport=transport,
        )
        app.state.upstream_client = UpstreamClient(client, redactor, logger)
        try:
            yield
        finally:
            await client.aclose()

    app = FastAPI(title="Credential Proxy", version=VERSION, lifespan=lifespan)
    app.state.redactor = redactor
    app.state.routing_service = RoutingService(registry, HeaderBuilder())

    # Added innermost first; the last one added runs first
    app.add_middleware(
        RateLimitMiddleware,
        prefix="/api/proxy",
        limit=config.limits.proxy_max,
        window_seconds=config.limits.window_seconds,
        message="API rate limit exceeded, please try again later.",
    )
    app.add_middleware(
        ResponseCacheMiddleware,
        paths=(SERVICES_PATH,),
        ttl_seconds=config.cache.ttl_seconds,
    )
    app.add_middleware(
        RateLimitMiddleware,
        prefix="/api/",
        limit=config.limits.general_max,
        window_seconds=config.limits.window_seconds,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLogMiddleware, logger=logger, redactor=redactor)

    @app.get("/health")
    async def health():
        return await handle_health(config, VERSION)

    @app.get(SERVICES_PATH)
    async def list_services(request: Request):
        return await handle_services(request)

    @app.post("/api/proxy/{service}")
    async def proxy(service: str, request: Request):
        return await handle_proxy(request, service, config, logger)

    @app.exception_handler(StarletteHTTPException)
    async def on_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (404, 405):
            return not_found(request)
        return await http_exception_handler(request, exc)

    @app.exception_handler(Exception)
    async def on_unhandled(request: Request, exc: Exception):
        logger.log_error(request.url.path, 500, redactor.redact(f"{type(exc).__name__}: {exc}"))
        return internal_error()

    return app
