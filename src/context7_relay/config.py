"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Command-line overrides  (--api-key, --transport)
  2. Legacy environment names (CONTEXT7_API_KEY, MCP_TRANSPORT)
  3. Environment variables    (CONTEXT7_RELAY__CACHE__TTL_SECONDS=600)
  4. context7-relay.yaml      (searched in cwd, then the platform config dir)
  5. Hardcoded defaults

The config file is optional — all fields have sensible defaults.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

CONFIG_FILE_NAME = "context7-relay.yaml"
_DEFAULT_CONFIG_DIR = platformdirs.user_config_dir("context7-relay")

LEGACY_API_KEY_ENV = "CONTEXT7_API_KEY"
LEGACY_TRANSPORT_ENV = "MCP_TRANSPORT"


def _find_config_file() -> str | None:
    """Return the path of the first context7-relay.yaml found, or None."""
    candidates = [
        Path(CONFIG_FILE_NAME),
        Path(_DEFAULT_CONFIG_DIR) / CONFIG_FILE_NAME,
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class ServerSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    transport: Literal["stdio"] = "stdio"


class UpstreamSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    api_key: str | None = None
    mcp_url: str = "https://mcp.context7.com/mcp"
    api_base: str = "https://context7.com/api/v1"
    # Seconds. Applied to the shared HTTP client, not by the service itself.
    connection_timeout: float = Field(default=5.0, ge=1.0)


class CacheSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    ttl_seconds: float = Field(default=3600.0, gt=0)
    cleanup_interval_seconds: float = Field(default=300.0, gt=0)


class DocsSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    min_tokens: int = Field(default=1000, ge=100)
    default_tokens: int = 5000

    @model_validator(mode="after")
    def check_default_not_below_min(self) -> DocsSettings:
        if self.default_tokens < self.min_tokens:
            raise ValueError("default_tokens must be greater than or equal to min_tokens")
        return self


class LoggingSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: CONTEXT7_RELAY__DOCS__MIN_TOKENS=2000
        env_prefix="CONTEXT7_RELAY__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    server: ServerSettings = ServerSettings()
    upstream: UpstreamSettings = UpstreamSettings()
    cache: CacheSettings = CacheSettings()
    docs: DocsSettings = DocsSettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )


def load_settings(
    *,
    api_key: str | None = None,
    transport: str | None = None,
) -> Settings:
    """Build Settings, layering CLI values and legacy env names on top.

    Raises ``pydantic.ValidationError`` on invalid configuration.
    """
    overrides: dict[str, dict[str, Any]] = {}

    api_key = api_key or os.environ.get(LEGACY_API_KEY_ENV)
    if api_key:
        overrides["upstream"] = {"api_key": api_key}

    transport = transport or os.environ.get(LEGACY_TRANSPORT_ENV)
    if transport:
        overrides["server"] = {"transport": transport}

    return Settings(**overrides)
