"""Shared protocol definitions."""

from typing import Protocol


class RequestLogger(Protocol):
    """Protocol for request logging (Dashboard, ConsoleLogger).

    Callers pass values that are already redacted.
    """

    def log_request(self, method: str, path: str, client_ip: str, user_agent: str) -> None: ...
    def log_proxy(self, service: str, method: str, url: str) -> None: ...
    def log_error(self, route: str, status: int | None, message: str) -> None: ...
