"""Credential provisioning - the upstream API key comes from config or environment."""

import os

from rich.console import Console

from core.config import CONFIG_FILE, Config

console = Console()

API_KEY_ENV = "WIDGET_PROXY_API_KEY"


def resolve_api_key(config: Config) -> str:
    """Return the API key, preferring the environment over the config file."""
    env_key = os.environ.get(API_KEY_ENV, "").strip()
    if env_key:
        return env_key
    return config.upstream.api_key.strip()


def with_resolved_credential(config: Config) -> Config:
    """Return a copy of the config carrying the resolved API key."""
    upstream = config.upstream.model_copy(update={"api_key": resolve_api_key(config)})
    return config.model_copy(update={"upstream": upstream})


def mask(value: str) -> str:
    if len(value) <= 10:
        return "***"
    return value[:6] + "..." + value[-4:]


def check_credential(config: Config) -> bool:
    """Check whether an upstream credential is available."""
    api_key = resolve_api_key(config)
    if api_key:
        source = API_KEY_ENV if os.environ.get(API_KEY_ENV, "").strip() else str(CONFIG_FILE)
        console.print(f"[green]Credential configured[/green] {mask(api_key)} [dim](from {source})[/dim]")
        return True
    else:
        console.print("[yellow]No upstream credential configured[/yellow]")
        console.print(f"\n[dim]Set[/dim] {API_KEY_ENV} [dim]or edit[/dim] {CONFIG_FILE}")
        return False
