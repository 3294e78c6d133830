"""Configuration models for ucpcheck."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from ucpcheck.config.sources import UcpCheckYamlSource
from ucpcheck.profile.constants import CANONICAL_DOMAIN, OFFICIAL_NAMESPACE, ORDER_CAPABILITY, VENDOR_PREFIX

DEFAULT_TIMEOUT_MS = 10_000
DEFAULT_CACHE_TTL_MS = 15 * 60 * 1000


class NetworkConfig(BaseModel):
    """Network fetch and schema cache configuration."""

    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, ge=1, description="Per-request fetch timeout.")
    cache_ttl_ms: int = Field(default=DEFAULT_CACHE_TTL_MS, ge=0, description="Schema cache entry lifetime.")
    max_concurrency: int = Field(default=8, ge=1, le=64)
    user_agent: str = Field(default="ucpcheck/0.1.0")


class ProtocolConfig(BaseModel):
    """Protocol constants the rules checker enforces."""

    official_namespace: str = Field(default=OFFICIAL_NAMESPACE)
    canonical_domain: str = Field(default=CANONICAL_DOMAIN)
    vendor_prefix: str = Field(default=VENDOR_PREFIX)
    order_capability: str = Field(default=ORDER_CAPABILITY)

    @field_validator("official_namespace", "vendor_prefix")
    @classmethod
    def _dotted(cls, value: str) -> str:
        if not value.endswith("."):
            raise ValueError("namespace prefix must end with '.'")
        return value

    @field_validator("canonical_domain")
    @classmethod
    def _lower_domain(cls, value: str) -> str:
        normalized = value.strip().lower()
        if not normalized:
            raise ValueError("canonical_domain must not be empty")
        return normalized


class UcpCheckConfig(BaseSettings):
    """Root configuration model for ucpcheck."""

    network: NetworkConfig = Field(default_factory=NetworkConfig)
    protocol: ProtocolConfig = Field(default_factory=ProtocolConfig)

    model_config = SettingsConfigDict(
        env_prefix="UCPCHECK_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Priority: explicit kwargs > UCPCHECK_* environment > yaml_file
        return (init_settings, env_settings, UcpCheckYamlSource(settings_cls))

    @classmethod
    def from_yaml(cls, path: str | Path) -> UcpCheckConfig:
        """Build settings layered over the given YAML file."""
        bound = type(
            cls.__name__,
            (cls,),
            {"__module__": cls.__module__, "model_config": SettingsConfigDict(yaml_file=Path(path))},
        )
        return bound()
