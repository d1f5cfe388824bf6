"""Upstream URL composition."""

from collections.abc import Mapping
from urllib.parse import parse_qsl, unquote, urlencode, urljoin, urlsplit, urlunsplit

from core.exceptions import EndpointOutsideBase, InternalError
from core.registry import CredentialLocation


def compose_url(
    base_url: str,
    endpoint: str,
    params: Mapping[str, str] | None,
    credential_key: str,
    credential_value: str,
    location: CredentialLocation,
) -> str:
    """Build the absolute upstream URL for ``endpoint`` under ``base_url``.

    The result always keeps the scheme and authority of ``base_url``; an
    endpoint that carries its own host only contributes its path and query.
    """
    base = urlsplit(base_url)
    relative = _relative_reference(endpoint)

    # Treat the base as a directory so its path is kept
    base_dir = urlunsplit((base.scheme, base.netloc, base.path.rstrip("/") + "/", "", ""))
    resolved = urlsplit(urljoin(base_dir, "./" + relative))

    if (resolved.scheme, resolved.netloc) != (base.scheme, base.netloc):
        raise InternalError("Composed URL escaped the service origin")
    # Dot segments, encoded or not, may not climb above the base path
    base_path = urlsplit(base_dir).path
    if not resolved.path.startswith(base_path) or ".." in unquote(resolved.path).split("/"):
        raise EndpointOutsideBase("Endpoint must stay within the service base path")

    query = parse_qsl(resolved.query, keep_blank_values=True)
    if params:
        query.extend(params.items())
    if location is CredentialLocation.QUERY:
        query.append((credential_key, credential_value))

    return urlunsplit((base.scheme, base.netloc, resolved.path, urlencode(query), ""))


def _relative_reference(endpoint: str) -> str:
    parts = urlsplit(endpoint)
    if parts.netloc:
        # Absolute or scheme-relative URL: drop its origin
        endpoint = parts.path
        if parts.query:
            endpoint = f"{endpoint}?{parts.query}"
    else:
        endpoint = endpoint.split("#", 1)[0]
    if endpoint.startswith("/"):
        endpoint = endpoint[1:]
    return endpoint
