"""Shared request data types."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ProxyRequest:
    """A validated client proxy request."""

    endpoint: str
    method: str = "GET"
    params: dict[str, str] = field(default_factory=dict)
    body: Any = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "ProxyRequest":
        """Build from a payload that already passed validation."""
        return cls(
            endpoint=payload["endpoint"],
            method=payload.get("method") or "GET",
            params=dict(payload.get("params") or {}),
            body=payload.get("body"),
        )


@dataclass(frozen=True)
class PreparedRequest:
    """Prepared data for an upstream request."""

    service: str
    method: str
    url: str
    headers: dict[str, str]
    body: Any = None


@dataclass(frozen=True)
class ProxyResponse:
    """Uniform envelope returned to every gateway client."""

    success: bool
    data: Any = None
    error: str | None = None
    status: int | None = None

    @classmethod
    def ok(cls, data: Any, status: int) -> "ProxyResponse":
        return cls(success=True, data=data, status=status)

    @classmethod
    def failure(cls, error: str, status: int | None = None) -> "ProxyResponse":
        return cls(success=False, error=error, status=status)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"success": self.success}
        if self.success:
            payload["data"] = self.data
        else:
            payload["error"] = self.error
        if self.status is not None:
            payload["status"] = self.status
        return payload
