"""Configuration models and loading."""

import json
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

CONFIG_DIR = Path.home() / ".config" / "widget-api-proxy"
CONFIG_FILE = CONFIG_DIR / "config.json"

DEFAULT_UPSTREAM_URL = "https://api.widgetcloud.io"


class ProxySettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    host: str = "127.0.0.1"
    port: int = 8080
    mount_path: str = "/api/proxy"
    debug: bool = False


class UpstreamSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    base_url: str = DEFAULT_UPSTREAM_URL
    api_key: str = ""
    credential_header: str = "Authorization"
    credential_scheme: str = "Bearer"
    timeout: float = 60.0
    # Reserved top-level body field marking an upstream API error
    error_field: str = "api_error"

    @property
    def credential_value(self) -> str:
        """Header value sent upstream for the configured credential."""
        if self.credential_scheme:
            return f"{self.credential_scheme} {self.api_key}"
        return self.api_key


class LimitsSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_connections: int = 100
    max_keepalive_connections: int = 20
    keep_alive_timeout: int = 5
    max_body_size: int = 10 * 1024 * 1024  # 10MB


class Config(BaseModel):
    model_config = ConfigDict(frozen=True)

    proxy: ProxySettings = Field(default_factory=ProxySettings)
    upstream: UpstreamSettings = Field(default_factory=UpstreamSettings)
    limits: LimitsSettings = Field(default_factory=LimitsSettings)


def load_config(config_file: Path = CONFIG_FILE) -> Config:
    """Load configuration from JSON file, creating default if needed."""
    if not config_file.exists():
        config_file.parent.mkdir(parents=True, exist_ok=True)
        default = Config()
        config_file.write_text(default.model_dump_json(indent=2))
        return default

    try:
        data = json.loads(config_file.read_text())
        return Config.model_validate(data)
    except (json.JSONDecodeError, ValidationError):
        # Backup corrupted config and recreate default
        backup = config_file.with_suffix(".json.bak")
        config_file.rename(backup)
        default = Config()
        config_file.write_text(default.model_dump_json(indent=2))
        return default
