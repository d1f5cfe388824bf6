"""Real-time CLI dashboard for proxy monitoring."""

from datetime import datetime
from threading import Lock

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import Config
from ui.log_utils import write_cli_log

console = Console()


class ProxyCall:
    """Info about a single proxied call."""

    def __init__(self, service: str, method: str, url: str, timestamp: datetime):
        self.service = service
        self.method = method
        self.url = url[:80] + "..." if len(url) > 80 else url
        self.timestamp = timestamp


class Dashboard:
    """Real-time dashboard showing traffic per upstream service."""

    def __init__(self, config: Config, services: list[str]):
        self.config = config
        self._lock = Lock()
        self._services = services
        self._calls: list[ProxyCall] = []
        self._max_calls = 8
        self._request_count = 0
        self._service_count = {name: 0 for name in services}
        self._errors: list[str] = []
        self._live: Live | None = None

    def start(self) -> "Dashboard":
        """Start the live dashboard."""
        self._live = Live(
            self._build_layout(),
            console=console,
            refresh_per_second=4,
            screen=False,
        )
        self._live.start()
        return self

    def stop(self) -> None:
        """Stop the live dashboard."""
        if self._live:
            self._live.stop()

    def log_request(self, method: str, path: str, client_ip: str, user_agent: str) -> None:
        """Log an inbound request."""
        with self._lock:
            self._request_count += 1
            self._refresh()
            write_cli_log("REQUEST", f"{method} {path}", ip=client_ip, ua=f'"{user_agent}"')

    def log_proxy(self, service: str, method: str, url: str) -> None:
        """Log a call forwarded to an upstream service."""
        with self._lock:
            self._service_count[service] = self._service_count.get(service, 0) + 1
            self._calls.insert(0, ProxyCall(service, method, url, datetime.now()))
            self._calls = self._calls[: self._max_calls]
            self._refresh()
            write_cli_log("PROXY", url, service=service, method=method)

    def log_error(self, route: str, status: int | None, message: str) -> None:
        """Log an error."""
        with self._lock:
            truncated = message[:50] + "..." if len(message) > 50 else message
            self._errors.insert(0, f"{route} {status or '-'}: {truncated}")
            self._errors = self._errors[:3]
            self._refresh()
            write_cli_log("ERROR", message[:200], route=route, status=status)

    def _refresh(self) -> None:
        """Refresh the display."""
        if self._live:
            self._live.update(self._build_layout())

    def _build_layout(self) -> Layout:
        """Build the dashboard layout."""
        layout = Layout()

        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="body"),
            Layout(name="footer", size=5),
        )

        layout["body"].split_row(
            Layout(name="services", ratio=1),
            Layout(name="calls", ratio=3),
        )

        layout["header"].update(self._build_header())
        layout["services"].update(self._build_services_panel())
        layout["calls"].update(self._build_calls_panel())
        layout["footer"].update(self._build_footer())

        return layout

    def _build_header(self) -> Panel:
        """Build header with stats."""
        stats = Text()
        stats.append("Credential Proxy", style="bold cyan")
        stats.append("  |  ")
        stats.append(f"Requests: {self._request_count}", style="blue")
        stats.append("  |  ")
        stats.append(f"Env: {self.config.server.environment}", style="magenta")
        stats.append("  |  ")
        stats.append(f"Port: {self.config.server.port}", style="dim")

        return Panel(stats, style="cyan")

    def _build_services_panel(self) -> Panel:
        """Build per-service counter panel."""
        if self._services:
            content = Table.grid(padding=(0, 1))
            content.add_column()
            content.add_column(justify="right")
            for name in self._services:
                content.add_row(f"[bold]{name}[/bold]", str(self._service_count.get(name, 0)))
        else:
            content = Text("No services configured", style="yellow")

        return Panel(content, title="[blue]Services[/blue]", border_style="blue")

    def _build_calls_panel(self) -> Panel:
        """Build recent upstream calls panel."""
        if self._calls:
            table = Table(show_header=True, header_style="bold", expand=True, box=None)
            table.add_column("Time", style="dim", width=8)
            table.add_column("Service", width=12)
            table.add_column("Method", width=7)
            table.add_column("URL", ratio=1)

            for call in self._calls:
                table.add_row(
                    call.timestamp.strftime("%H:%M:%S"),
                    call.service,
                    call.method,
                    call.url,
                )

            content = table
        else:
            content = Text("Waiting for requests...", style="dim")

        return Panel(content, title="[magenta]Upstream calls[/magenta]", border_style="magenta")

    def _build_footer(self) -> Panel:
        """Build footer with errors and help."""
        if self._errors:
            error_text = Text()
            for err in self._errors:
                error_text.append("! ", style="red bold")
                error_text.append(err + "\n", style="red")
            content = error_text
        else:
            content = Text(
                f"POST http://localhost:{self.config.server.port}/api/proxy/<service>",
                style="dim",
            )

        return Panel(content, title="[dim]Status[/dim]", border_style="dim")
