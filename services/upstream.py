"""HTTP forwarding of prepared requests to upstream services."""

from json import JSONDecodeError
from typing import Any

import httpx

from core.exceptions import (
    NetworkError,
    UpstreamConnectionError,
    UpstreamError,
    UpstreamTimeoutError,
)
from core.protocols import RequestLogger
from core.redact import Redactor
from core.request_types import PreparedRequest, ProxyResponse

FALLBACK_ERROR = "API request failed"


class UpstreamClient:
    """Forward prepared requests and normalize the outcome into a ProxyResponse."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        redactor: Redactor,
        logger: RequestLogger,
    ) -> None:
        self._client = client
        self._redactor = redactor
        self._logger = logger

    async def forward(self, prepared: PreparedRequest) -> ProxyResponse:
        """Issue a single upstream call. Never raises for upstream or network failures."""
        self._logger.log_proxy(prepared.service, prepared.method, self._redactor.redact(prepared.url))
        try:
            response = await self._send(prepared)
            payload = self._redactor.redact_value(self._parse_body(response))
            self._raise_for_status(prepared, response, payload)
        except UpstreamError as e:
            self._logger.log_error(prepared.service, e.status_code, str(e))
            return ProxyResponse.failure(str(e), e.status_code)
        except NetworkError as e:
            message = self._redactor.redact(str(e))
            self._logger.log_error(prepared.service, None, message)
            return ProxyResponse.failure(message)

        return ProxyResponse.ok(payload, response.status_code)

    def _raise_for_status(self, prepared: PreparedRequest, response: httpx.Response, payload: Any) -> None:
        if response.is_success:
            return
        raise UpstreamError(
            self._redactor.redact(self._error_message(payload)),
            status_code=response.status_code,
            service=prepared.service,
        )

    async def _send(self, prepared: PreparedRequest) -> httpx.Response:
        """Execute the request, translating transport failures into NetworkError."""
        kwargs: dict[str, Any] = {"headers": prepared.headers}
        if prepared.body is not None:
            kwargs["json"] = prepared.body
        try:
            return await self._client.request(prepared.method, prepared.url, **kwargs)
        except httpx.TimeoutException:
            raise UpstreamTimeoutError(
                f"Upstream timeout contacting {prepared.service}",
                service=prepared.service,
            ) from None
        except httpx.RequestError as e:
            raise UpstreamConnectionError(
                f"Upstream connection error contacting {prepared.service}: {type(e).__name__}: {e}",
                service=prepared.service,
            ) from None

    @staticmethod
    def _parse_body(response: httpx.Response) -> Any:
        """JSON body when parseable, raw text otherwise."""
        if not response.content:
            return None
        try:
            return response.json()
        except (JSONDecodeError, UnicodeDecodeError):
            return response.text

    @staticmethod
    def _error_message(payload: Any) -> str:
        if isinstance(payload, dict):
            for field in ("error", "message"):
                value = payload.get(field)
                if isinstance(value, str) and value:
                    return value
                # {"error": {"message": "..."}} as returned by most LLM APIs
                if isinstance(value, dict) and isinstance(value.get("message"), str):
                    return value["message"]
            return FALLBACK_ERROR
        if isinstance(payload, str) and payload.strip():
            return payload.strip()
        return FALLBACK_ERROR
