"""Configuration models and loading."""

import json
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, ValidationError

CONFIG_DIR = Path.home() / ".config" / "request-duplicator"
CONFIG_FILE = CONFIG_DIR / "config.json"

Scheme = Literal["http", "https"]


class ProxySettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = Field(default=38972, ge=1, le=65535)
    dashboard: bool = True


class BackendSettings(BaseModel):
    scheme: Scheme = "https"
    host: str = "127.0.0.1"
    port: int = Field(ge=1, le=65535)


class StableSettings(BackendSettings):
    port: int = Field(default=443, ge=1, le=65535)


class DevSettings(BackendSettings):
    port: int = Field(default=8443, ge=1, le=65535)


class TLSSettings(BaseModel):
    enabled: bool = True
    cert_path: str = "keys/cert.pem"
    key_path: str = "keys/key.rsa"
    # Verify backend certificates on outbound calls
    verify_backends: bool = True


class LimitsSettings(BaseModel):
    max_body_size: int = Field(default=16 * 1024, gt=0)
    backend_timeout: float = Field(default=30.0, gt=0)
    max_connections: int = Field(default=100, gt=0)
    max_keepalive_connections: int = Field(default=20, ge=0)
    keep_alive_timeout: int = 5


class Config(BaseModel):
    proxy: ProxySettings = Field(default_factory=ProxySettings)
    stable: StableSettings = Field(default_factory=StableSettings)
    dev: DevSettings = Field(default_factory=DevSettings)
    tls: TLSSettings = Field(default_factory=TLSSettings)
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
