"""Routing orchestration for proxy requests."""

from datetime import UTC, datetime
from typing import Any

from core.compose import compose_url
from core.headers import HeaderBuilder
from core.registry import ServiceRegistry
from core.request_types import PreparedRequest, ProxyRequest
from core.validation import validate

BODY_METHODS = ("POST", "PUT", "PATCH")


class RoutingService:
    """Turn client proxy requests into authenticated upstream calls."""

    def __init__(
        self,
        registry: ServiceRegistry,
        header_builder: HeaderBuilder,
    ) -> None:
        self._registry = registry
        self._headers = header_builder

    def prepare(self, service: str, payload: dict[str, Any]) -> PreparedRequest:
        """Prepare a proxy request for forwarding.

        Raises:
            UnknownService: ``service`` is not configured.
            ValidationError: the payload is malformed.
        """
        entry = self._registry.lookup(service)
        error = validate(payload)
        if error is not None:
            raise error
        request = ProxyRequest.from_payload(payload)

        url = compose_url(
            entry.base_url,
            request.endpoint,
            request.params,
            entry.credential_key,
            entry.credential_value,
            entry.credential_location,
        )
        body = request.body if request.method in BODY_METHODS else None
        return PreparedRequest(
            service=entry.name,
            method=request.method,
            url=url,
            headers=self._headers.build(entry),
            body=body,
        )

    def list_services(self) -> dict[str, Any]:
        """Configured service names with a generation timestamp."""
        return {
            "services": self._registry.list_services(),
            "timestamp": datetime.now(UTC).isoformat(),
        }
