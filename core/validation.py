"""Structural validation of client proxy requests."""

from typing import Any

from core.exceptions import InvalidMethod, InvalidParams, MissingEndpoint, ValidationError

ALLOWED_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH")


def validate(payload: dict[str, Any]) -> ValidationError | None:
    """Return the first structural problem with a proxy request, or None."""
    endpoint = payload.get("endpoint")
    if endpoint is None or endpoint == "":
        return MissingEndpoint("Endpoint is required")
    if not isinstance(endpoint, str) or not endpoint.strip():
        return MissingEndpoint("Endpoint must be a non-empty string")

    method = payload.get("method")
    # null and "" both mean GET
    if method not in (None, "") and method not in ALLOWED_METHODS:
        return InvalidMethod("Invalid HTTP method")

    params = payload.get("params")
    if params is not None and not _is_flat_string_map(params):
        return InvalidParams("Params must be an object of string values")

    return None


def _is_flat_string_map(value: Any) -> bool:
    if not isinstance(value, dict):
        return False
    return all(isinstance(k, str) and isinstance(v, str) for k, v in value.items())
