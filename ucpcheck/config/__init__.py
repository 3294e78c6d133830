"""Unified configuration system for ucpcheck."""

from ucpcheck.config.loader import CONFIG_ENV_VAR, load_config, resolve_config_path
from ucpcheck.config.models import (
    DEFAULT_CACHE_TTL_MS,
    DEFAULT_TIMEOUT_MS,
    NetworkConfig,
    ProtocolConfig,
    UcpCheckConfig,
)
from ucpcheck.config.sources import ConfigLoadError, UcpCheckYamlSource

__all__ = [
    "CONFIG_ENV_VAR",
    "ConfigLoadError",
    "DEFAULT_CACHE_TTL_MS",
    "DEFAULT_TIMEOUT_MS",
    "NetworkConfig",
    "ProtocolConfig",
    "UcpCheckConfig",
    "UcpCheckYamlSource",
    "load_config",
    "resolve_config_path",
]
