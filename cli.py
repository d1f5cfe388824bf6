"""CLI entry point for credential-proxy."""

import sys
from datetime import datetime

from dotenv import load_dotenv
from rich.console import Console

from app import create_app
from auth import print_credential_status
from core.config import ENV_FALLBACKS, ENV_FILE, ENV_VARS, load_config
from core.exceptions import ConfigurationError
from services.targets import build_registry
from ui.console_logger import ConsoleLogger
from ui.dashboard import Dashboard
from ui.log_utils import clear_logs, write_cli_log

console = Console()


def main():
    """Main CLI entry point."""
    args = sys.argv[1:]

    if "--help" in args or "-h" in args:
        _print_help()
        return

    if "--config" in args:
        _print_config_help()
        return

    load_dotenv(ENV_FILE)
    try:
        config = load_config()
    except ConfigurationError as e:
        console.print(f"[red][ERROR][/red] {e}")
        sys.exit(1)

    if "--check" in args:
        print_credential_status(config)
        return

    registry = build_registry(
        config,
        warn=lambda message: console.print(f"[yellow]Warning:[/yellow] {message}"),
    )
    if not registry.list_services():
        console.print("[yellow]Warning:[/yellow] No upstream services configured (run with --check)")

    clear_logs()
    use_dashboard = "--no-dashboard" not in args and console.is_terminal
    if use_dashboard:
        logger = Dashboard(config, registry.list_services())
    else:
        logger = ConsoleLogger(console)

    import uvicorn

    app = create_app(config, logger, registry)

    uvicorn_config = uvicorn.Config(
        app,
        host=config.server.host,
        port=config.server.port,
        log_level="warning",
        timeout_keep_alive=config.limits.keep_alive_timeout,
    )
    server = uvicorn.Server(uvicorn_config)

    if use_dashboard:
        logger.start()
    start_time = datetime.now()
    write_cli_log(
        "STARTUP",
        "Proxy started",
        port=config.server.port,
        environment=config.server.environment,
        services=",".join(registry.list_services()) or "none",
    )
    try:
        server.run()
    finally:
        duration = datetime.now() - start_time
        write_cli_log("SHUTDOWN", "Proxy stopped", duration=str(duration))
        if use_dashboard:
            logger.stop()


def _print_config_help():
    """Print the environment variables the proxy reads."""
    console.print(f"[bold]Env file:[/bold] {ENV_FILE}")
    for section, fields in ENV_VARS.items():
        console.print(f"\n[bold]{section}[/bold]")
        for field, var in fields.items():
            fallback = ENV_FALLBACKS.get(var)
            suffix = f" [dim](or {fallback})[/dim]" if fallback else ""
            console.print(f"  {var}{suffix} [dim]-> {section}.{field}[/dim]")


def _print_help():
    """Print help message."""
    help_text = """
[bold cyan]Credential Proxy[/bold cyan]

Forwards client requests to third-party APIs, injecting server-side API keys.

[bold]Usage:[/bold]
    credential-proxy                  Start with live dashboard
    credential-proxy --no-dashboard   Start with line logging
    credential-proxy --check          Show which services are configured
    credential-proxy --config         Show the environment variables read
    credential-proxy --help           Show this help

[bold]Endpoints:[/bold]
    GET  /health
    GET  /api/proxy/services
    POST /api/proxy/:service   {"endpoint", "method", "params", "body"}
"""
    console.print(help_text)


if __name__ == "__main__":
    main()
