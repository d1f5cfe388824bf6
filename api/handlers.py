"""FastAPI route handlers."""

import json
from datetime import UTC, datetime
from json import JSONDecodeError
from typing import Any

from fastapi import Request, Response
from fastapi.responses import JSONResponse

from core.config import Config
from core.exceptions import InvalidJSON, RequestTooLarge, UnknownService, ValidationError
from core.protocols import RequestLogger
from core.request_types import ProxyResponse
from ui.log_utils import write_incoming_log

AVAILABLE_ENDPOINTS = [
    "GET /health - Health check",
    "GET /api/proxy/services - List available services",
    "POST /api/proxy/:service - Proxy request to service",
]


def _envelope(result: ProxyResponse, status_code: int) -> JSONResponse:
    return JSONResponse(content=result.to_dict(), status_code=status_code)


async def _parse_json_body(request: Request, max_bytes: int) -> dict[str, Any]:
    """Parse request body as a JSON object."""
    raw_body = await request.body()
    if len(raw_body) > max_bytes:
        raise RequestTooLarge("Request body too large")

    text_body = raw_body.decode("utf-8", errors="replace")
    try:
        body = json.loads(text_body)
    except JSONDecodeError as e:
        raise InvalidJSON(f"Invalid JSON: {e.msg}") from None
    if not isinstance(body, dict):
        raise InvalidJSON("Request body must be a JSON object")
    return body


async def handle_proxy(
    request: Request,
    service: str,
    config: Config,
    logger: RequestLogger,
) -> Response:
    """Handle POST /api/proxy/{service}."""
    redactor = request.app.state.redactor
    routing_service = request.app.state.routing_service
    upstream = request.app.state.upstream_client

    try:
        body = await _parse_json_body(request, config.limits.max_body_bytes)
    except RequestTooLarge as e:
        return _envelope(ProxyResponse.failure(str(e)), 413)
    except InvalidJSON as e:
        return _envelope(ProxyResponse.failure(str(e)), 400)

    try:
        prepared = routing_service.prepare(service, body)
    except (UnknownService, ValidationError) as e:
        return _envelope(ProxyResponse.failure(str(e)), 400)
    except Exception as e:
        logger.log_error(service, 500, redactor.redact(f"{type(e).__name__}: {e}"))
        return _envelope(ProxyResponse.failure("Internal proxy error"), 500)

    if config.server.debug:
        write_incoming_log(
            prepared.service,
            request.method,
            request.url.path,
            dict(request.headers),
            body,
            redactor,
        )

    try:
        result = await upstream.forward(prepared)
    except Exception as e:
        logger.log_error(service, 500, redactor.redact(f"{type(e).__name__}: {e}"))
        return _envelope(ProxyResponse.failure("Internal proxy error"), 500)

    if result.success:
        return _envelope(result, 200)
    # No upstream status means the upstream was never reached
    return _envelope(result, result.status or 500)


async def handle_services(request: Request) -> JSONResponse:
    """Handle GET /api/proxy/services."""
    return JSONResponse(content=request.app.state.routing_service.list_services())


async def handle_health(config: Config, version: str) -> JSONResponse:
    """Handle GET /health."""
    return JSONResponse(
        content={
            "status": "healthy",
            "timestamp": datetime.now(UTC).isoformat(),
            "version": version,
            "environment": config.server.environment,
        }
    )


def not_found(request: Request) -> JSONResponse:
    """Body for any unrouted path."""
    return JSONResponse(
        status_code=404,
        content={
            "success": False,
            "error": "Endpoint not found",
            "path": request.url.path,
            "availableEndpoints": AVAILABLE_ENDPOINTS,
        },
    )


def internal_error() -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal server error",
            "timestamp": datetime.now(UTC).isoformat(),
        },
    )
