"""Application settings loaded from environment variables and config files.

Configuration is loaded from (highest priority first):
1. Environment variables (provider keys use the ``DHR_`` prefix, everything
   else ``DHR_NOTIFIER_`` nested via ``__``; ``CHECK_INTERVAL_SECONDS`` and
   ``PORT`` are read as-is)
2. A ``.env`` file in the working directory
3. YAML config file named by the ``DHR_NOTIFIER_CONFIG_PATH`` env var
4. Defaults defined here
"""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Any, Self

import yaml
from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dhr_notifier.errors.notifier_errors import ConfigError

DEFAULT_API_URL = "https://api.dhrtecnologialtda.com/v1"


class StoreEngine(enum.StrEnum):
    """Supported persistence backends."""

    FILE = "file"
    MEMORY = "memory"
    REDIS = "redis"


# ---------------------------------------------------------------------------
# Sub-config models
# ---------------------------------------------------------------------------


class ProviderConfig(BaseSettings):
    """DHR payment provider API settings."""

    model_config = SettingsConfigDict(
        env_prefix="DHR_",
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    public_key: str = ""
    secret_key: str = ""
    api_url: str = DEFAULT_API_URL
    page_size: int = Field(default=50, ge=1)
    max_pages: int = Field(
        default=1,
        ge=1,
        description="Pages fetched per tick and record kind; 1 polls the first page only",
    )
    timeout: float = 15.0


class PollerConfig(BaseSettings):
    """Poll loop settings."""

    model_config = SettingsConfigDict(
        env_prefix="DHR_NOTIFIER_POLLER__",
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    interval_seconds: float = Field(
        default=5,
        gt=0,
        validation_alias=AliasChoices("interval_seconds", "check_interval_seconds"),
    )
    enabled: bool = True


class ServerConfig(BaseSettings):
    """HTTP server settings."""

    model_config = SettingsConfigDict(
        env_prefix="DHR_NOTIFIER_SERVER__",
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    host: str = "0.0.0.0"  # noqa: S104
    port: int = Field(default=3000, validation_alias="port")


class DispatchConfig(BaseSettings):
    """Outbound webhook delivery settings."""

    model_config = SettingsConfigDict(
        env_prefix="DHR_NOTIFIER_DISPATCH__",
        case_sensitive=False,
    )

    timeout: float = 10.0


class StoreConfig(BaseSettings):
    """Persistence settings for subscriptions and the dedup ledger."""

    model_config = SettingsConfigDict(
        env_prefix="DHR_NOTIFIER_STORE__",
        case_sensitive=False,
    )

    engine: StoreEngine = Field(
        default=StoreEngine.FILE,
        description="Storage backend: file, memory or redis",
    )
    data_dir: str = "."
    redis_url: str = "redis://localhost:6379/0"
    redis_prefix: str = "dhr_notifier"


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------


def _load_yaml(path: str | Path) -> dict[str, Any]:
    """Load a YAML configuration file and return its contents as a dict.

    Returns an empty dict if the file doesn't exist or is empty.
    """
    p = Path(path)
    if not p.exists():
        return {}
    text = p.read_text(encoding="utf-8")
    data = yaml.safe_load(text)
    return data if isinstance(data, dict) else {}


class AppConfig(BaseSettings):
    """Top-level application configuration.

    Loads settings from environment variables, an optional YAML file, and
    built-in defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="DHR_NOTIFIER_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    log_level: str = "INFO"
    config_path: str = ""

    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    poller: PollerConfig = Field(default_factory=PollerConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    dispatch: DispatchConfig = Field(default_factory=DispatchConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)

    @model_validator(mode="before")
    @classmethod
    def _merge_yaml(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Merge YAML config file contents under the env var overrides."""
        config_path = values.get("config_path", "")
        if not config_path:
            return values
        yaml_data = _load_yaml(config_path)
        # YAML values serve as defaults; env vars (already in *values*) win.
        for key, val in yaml_data.items():
            if key not in values or values[key] is None:
                values[key] = val
            elif isinstance(val, dict) and isinstance(values.get(key), dict):
                values[key] = {**val, **values[key]}
        return values

    @classmethod
    def from_yaml(cls, path: str | Path) -> Self:
        """Construct ``AppConfig`` loading defaults from a YAML file.

        Environment variables still override YAML values.
        """
        return cls(config_path=str(path))

    def require_credentials(self) -> None:
        """Refuse to run without both provider credentials.

        Raises:
            ConfigError: If the public or secret key is empty.
        """
        missing = [
            name
            for name, value in (
                ("DHR_PUBLIC_KEY", self.provider.public_key),
                ("DHR_SECRET_KEY", self.provider.secret_key),
            )
            if not value
        ]
        if missing:
            msg = f"DHR API keys not configured: {', '.join(missing)}"
            raise ConfigError(msg)
