"""Credential status reporting - which upstream services are usable."""

from rich.console import Console
from rich.table import Table

from core.config import Config
from core.redact import mask
from services.targets import TARGETS, resolve_base_url

console = Console()


def credential_rows(config: Config) -> list[tuple[str, str, str, str]]:
    """(service, env var, state, masked preview) for every known target."""
    rows = []
    for target in TARGETS:
        credential = config.credentials.secret(target.credential_field)
        if not credential:
            rows.append((target.name, target.env_var, "missing", ""))
        elif not resolve_base_url(target, config):
            rows.append((target.name, target.env_var, "no base URL", mask(credential)))
        else:
            rows.append((target.name, target.env_var, "configured", mask(credential)))
    return rows


def print_credential_status(config: Config) -> bool:
    """Print a status table. Returns True when at least one service is usable."""
    table = Table(title="Upstream credentials", header_style="bold")
    table.add_column("Service")
    table.add_column("Variable", style="dim")
    table.add_column("Status")
    table.add_column("Key")

    usable = False
    for name, env_var, state, preview in credential_rows(config):
        if state == "configured":
            usable = True
            status = "[green]configured[/green]"
        elif state == "missing":
            status = "[dim]missing[/dim]"
        else:
            status = f"[yellow]{state}[/yellow]"
        table.add_row(name, env_var, status, preview)

    console.print(table)
    if not usable:
        console.print("[yellow]No upstream services configured[/yellow]")
        console.print("[dim]Set at least one API key variable (see --config)[/dim]")
    return usable
