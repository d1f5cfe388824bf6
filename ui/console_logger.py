"""Line-oriented request logger for headless runs."""

from datetime import UTC, datetime

from rich.console import Console
from rich.markup import escape

from ui.log_utils import write_cli_log


class ConsoleLogger:
    """Print one line per event instead of a live dashboard."""

    def __init__(self, console: Console | None = None):
        self._console = console or Console()

    def log_request(self, method: str, path: str, client_ip: str, user_agent: str) -> None:
        self._print(f"{method} {escape(path)} - IP: {client_ip} - UA: {escape(user_agent)}")
        write_cli_log("REQUEST", f"{method} {path}", ip=client_ip, ua=f'"{user_agent}"')

    def log_proxy(self, service: str, method: str, url: str) -> None:
        self._print(f"[cyan]{service}[/cyan] {method} {escape(url)}")
        write_cli_log("PROXY", url, service=service, method=method)

    def log_error(self, route: str, status: int | None, message: str) -> None:
        self._print(f"[red]{route} {status or '-'}:[/red] {escape(message[:200])}")
        write_cli_log("ERROR", message[:200], route=route, status=status)

    def _print(self, line: str) -> None:
        timestamp = datetime.now(UTC).isoformat(timespec="seconds")
        self._console.print(f"[dim][{timestamp}][/dim] {line}", highlight=False)
