"""Locate ``ucpcheck.yaml`` and build the layered configuration."""

from __future__ import annotations

import os
from pathlib import Path

from ucpcheck.config.models import UcpCheckConfig

CONFIG_ENV_VAR = "UCPCHECK_CONFIG"
DEFAULT_FILENAME = "ucpcheck.yaml"


def resolve_config_path(path: str | Path | None = None) -> Path:
    """``$UCPCHECK_CONFIG`` first, then ``path``, then ``./ucpcheck.yaml``."""
    from_env = os.environ.get(CONFIG_ENV_VAR, "").strip()
    if from_env:
        return Path(from_env)
    if path is not None and str(path).strip():
        return Path(str(path).strip())
    return Path.cwd() / DEFAULT_FILENAME


def load_config(path: str | Path | None = None) -> UcpCheckConfig:
    """Build configuration from the YAML file with ``UCPCHECK_*`` environment overrides.

    A missing or empty file yields defaults. Raises ``ConfigLoadError`` for
    unreadable YAML and ``pydantic.ValidationError`` for out-of-range values.
    """
    return UcpCheckConfig.from_yaml(resolve_config_path(path))
