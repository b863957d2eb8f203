"""CLI entry point for widget-api-proxy."""

import sys
from datetime import datetime

from rich.console import Console

from app import create_app
from core.config import CONFIG_FILE, load_config
from credentials import API_KEY_ENV, check_credential, with_resolved_credential
from ui.dashboard import Dashboard, widget_endpoint
from ui.log_utils import clear_logs, write_cli_log

console = Console()

WIDGET_ATTRIBUTE = "data-proxy-url"


def main():
    """Main CLI entry point."""
    config = with_resolved_credential(load_config())

    # Handle CLI arguments
    if len(sys.argv) > 1:
        arg = sys.argv[1]

        if arg in ("--check", "--auth"):
            check_credential(config)
            return

        if arg == "--config":
            console.print(f"[bold]Config:[/bold] {CONFIG_FILE}")
            return

        if arg == "--snippet":
            print(widget_snippet(config))
            return

        if arg in ("--help", "-h"):
            _print_help()
            return

    # The credential is required before anything is served
    if not config.upstream.api_key:
        console.print("[red][ERROR][/red] Upstream API key not configured!")
        console.print(f"[dim]Set {API_KEY_ENV} or edit {CONFIG_FILE} and set upstream.api_key[/dim]")
        sys.exit(1)

    # Clear previous logs and start dashboard
    clear_logs()
    dashboard = Dashboard(config)

    import uvicorn

    app = create_app(config, dashboard)

    # Run with dashboard
    uvicorn_config = uvicorn.Config(
        app,
        host=config.proxy.host,
        port=config.proxy.port,
        log_level="debug" if config.proxy.debug else "warning",
        timeout_keep_alive=config.limits.keep_alive_timeout,
    )
    server = uvicorn.Server(uvicorn_config)

    dashboard.start()
    start_time = datetime.now()
    write_cli_log("STARTUP", "Proxy started", port=config.proxy.port, upstream=config.upstream.base_url)
    try:
        server.run()
    finally:
        duration = datetime.now() - start_time
        write_cli_log("SHUTDOWN", "Proxy stopped", duration=str(duration))
        dashboard.stop()


def widget_snippet(config) -> str:
    """Declarative attribute the widget uses to find the proxy endpoint."""
    return f'{WIDGET_ATTRIBUTE}="{widget_endpoint(config)}"'


def _print_help():
    """Print help message."""
    help_text = f"""
[bold cyan]Widget API Proxy[/bold cyan]

Forwards widget requests to the upstream API with a server-held credential.

[bold]Usage:[/bold]
    widget-api-proxy              Start with live dashboard
    widget-api-proxy --check      Check credential status
    widget-api-proxy --config     Show config location
    widget-api-proxy --snippet    Print the widget endpoint attribute
    widget-api-proxy --help       Show this help

[bold]Credential:[/bold]
    Set {API_KEY_ENV} or upstream.api_key in the config file.
"""
    console.print(help_text)


if __name__ == "__main__":
    main()
