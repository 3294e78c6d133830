"""pydantic-settings source for ``ucpcheck.yaml``."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]
from pydantic_settings import YamlConfigSettingsSource


class ConfigLoadError(ValueError):
    """Raised when configuration YAML cannot be parsed."""


class UcpCheckYamlSource(YamlConfigSettingsSource):
    """YAML settings source that reports parse errors with file position."""

    def _read_file(self, file_path: Path) -> dict[str, Any]:
        try:
            data = super()._read_file(file_path)
        except yaml.YAMLError as exc:
            mark = getattr(exc, "problem_mark", None)
            where = f"{file_path}:{mark.line + 1}:{mark.column + 1}" if mark is not None else str(file_path)
            raise ConfigLoadError(f"Invalid YAML at {where}") from exc
        if not isinstance(data, dict):
            raise ConfigLoadError(f"Config root must be mapping: {file_path}")
        return data
