"""
Configuration management for the RAML server dispatcher.
"""
from __future__ import annotations

from collections.abc import Iterator, Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from raml_core.errors import ConfigurationError

PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Load environment variables from .env file if it exists
try:
    from dotenv import load_dotenv
    env_file = Path(".env")
    if env_file.exists():
        load_dotenv(env_file, override=False)
    else:
        load_dotenv(PROJECT_ROOT / ".env", override=False)
except ImportError:
    # python-dotenv not installed, pydantic-settings will handle env vars
    pass

REQUIRED_OPTIONS: tuple[str, ...] = (
    "server",
    "api_uri_part",
    "raml_uri_part",
    "raml_dir",
    "controller_namespace",
)

DEFAULT_OPTIONS: dict[str, Any] = {
    "index_file": "index.raml",
    "raml_media_type": "text/raml",
    "api_media_type": "application/json",
}

_MISSING = object()


class RouterConfig(Mapping):
    """Immutable router options.

    Required keys are only checked when they are read, so a router built from
    an incomplete mapping fails at the first access of the missing key.
    """

    def __init__(self, options: Mapping[str, Any] | None = None, **extra: Any):
        merged = dict(DEFAULT_OPTIONS)
        merged.update(options or {})
        merged.update(extra)
        self._options = MappingProxyType(merged)

    def get_option(self, name: str, default: Any = _MISSING) -> Any:
        if name in self._options:
            return self._options[name]
        if default is _MISSING:
            raise ConfigurationError(name)
        return default

    def __getitem__(self, name: str) -> Any:
        return self.get_option(name)

    def __iter__(self) -> Iterator[str]:
        return iter(self._options)

    def __len__(self) -> int:
        return len(self._options)

    def __repr__(self) -> str:
        return f"RouterConfig({dict(self._options)!r})"

    @property
    def server(self) -> str:
        return self.get_option("server")

    @property
    def api_uri_part(self) -> str:
        return self.get_option("api_uri_part")

    @property
    def raml_uri_part(self) -> str:
        return self.get_option("raml_uri_part")

    @property
    def raml_dir(self) -> str:
        return self.get_option("raml_dir")

    @property
    def controller_namespace(self) -> str:
        return self.get_option("controller_namespace")

    @property
    def api_uri(self) -> str:
        return f"{self.server}/{self.api_uri_part}"

    @property
    def raml_uri(self) -> str:
        return f"{self.server}/{self.raml_uri_part}"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        extra="ignore",
        env_ignore_empty=True,
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
    )

    # Service
    app_name: str = "RAML Server"
    app_version: str = "0.1.0"
    environment: str = Field(default="production", validation_alias="ENVIRONMENT")

    # Router options
    server: Optional[str] = Field(default=None, validation_alias="RAML_SERVER_URL")
    api_uri_part: Optional[str] = Field(default=None, validation_alias="RAML_API_URI_PART")
    raml_uri_part: Optional[str] = Field(default=None, validation_alias="RAML_URI_PART")
    raml_dir: Optional[str] = Field(default=None, validation_alias="RAML_DIR")
    controller_namespace: Optional[str] = Field(
        default=None, validation_alias="RAML_CONTROLLER_NAMESPACE"
    )
    index_file: str = Field(default="index.raml", validation_alias="RAML_INDEX_FILE")
    raml_media_type: str = Field(default="text/raml", validation_alias="RAML_MEDIA_TYPE")
    api_media_type: str = Field(default="application/json", validation_alias="RAML_API_MEDIA_TYPE")

    # Definition cache
    definition_cache: Literal["none", "memory", "redis"] = Field(
        default="memory", validation_alias="DEFINITION_CACHE"
    )
    redis_url: str = Field(default="redis://localhost:6379/0", validation_alias="REDIS_URL")
    definition_cache_prefix: str = Field(
        default="raml:definition:", validation_alias="DEFINITION_CACHE_PREFIX"
    )
    definition_cache_ttl_seconds: Optional[int] = Field(
        default=None, validation_alias="DEFINITION_CACHE_TTL_SECONDS"
    )

    # Security
    api_key: Optional[str] = Field(default=None, validation_alias="RAML_API_KEY")

    # Logging
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: Optional[str] = Field(default=None, validation_alias="LOG_FILE")

    def router_config(self) -> RouterConfig:
        """Build router options from the configured values only."""
        options: dict[str, Any] = {
            name: getattr(self, name)
            for name in REQUIRED_OPTIONS
            if getattr(self, name) is not None
        }
        options["index_file"] = self.index_file
        options["raml_media_type"] = self.raml_media_type
        options["api_media_type"] = self.api_media_type
        return RouterConfig(options)


settings = Settings()
