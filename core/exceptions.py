"""Custom exception hierarchy for the credential proxy."""


class ProxyError(Exception):
    """Base exception for all proxy errors."""


class ConfigurationError(ProxyError):
    """Raised when configuration is missing or invalid."""


class UnknownService(ProxyError):
    """Raised when a request names a service that is not configured.

    Attributes:
        service: Requested service name
        available: Names of the configured services
    """

    def __init__(self, service: str, available: list[str]) -> None:
        listing = ", ".join(available) if available else "none"
        super().__init__(f"Invalid service: {service}. Available services: {listing}")
        self.service = service
        self.available = available


class ValidationError(ProxyError):
    """Raised when a proxy request is structurally malformed."""


class MissingEndpoint(ValidationError):
    """Endpoint is absent, empty or not a string."""


class InvalidMethod(ValidationError):
    """Method is not one of the supported HTTP methods."""


class InvalidParams(ValidationError):
    """Params is not a flat mapping of strings."""


class EndpointOutsideBase(ValidationError):
    """Endpoint resolves above the service base path."""


class InvalidJSON(ProxyError):
    """Request body is not valid JSON."""


class RequestTooLarge(ProxyError):
    """Request body exceeds size limit."""


class UpstreamError(ProxyError):
    """Raised when an upstream service returns an error.

    Attributes:
        message: Error message
        status_code: HTTP status code from upstream (optional)
        service: Upstream service name (e.g., 'openai', 'gemini')
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        service: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.service = service


class NetworkError(ProxyError):
    """Raised when an upstream service could not be reached."""

    def __init__(
        self,
        message: str,
        service: str | None = None,
    ) -> None:
        super().__init__(message)
        self.service = service


class UpstreamTimeoutError(NetworkError):
    """Raised when an upstream request times out."""


class UpstreamConnectionError(NetworkError):
    """Raised when unable to connect to an upstream service."""


class InternalError(ProxyError):
    """Unexpected failure inside the proxy pipeline."""
