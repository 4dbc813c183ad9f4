"""Configuration management utilities."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml


class ConfigManager:
    """YAML-backed loader for named assessment settings files."""

    def __init__(self, base_path: str | Path):
        self._base_path = Path(base_path)

    def load(self, name: str) -> dict[str, Any]:
        """Load a YAML configuration by name without file extension."""
        return self.read(self._base_path / f"{name}.yaml")

    def read(self, path: Path) -> dict[str, Any]:
        """Read one YAML file.

        Empty files load as an empty mapping; anything other than a mapping at
        the top level is rejected.
        """
        with path.open("r", encoding="utf-8") as handle:
            loaded = yaml.safe_load(handle) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"Config {path.name!r} must be a YAML mapping")
        return loaded

    def available(self) -> list[str]:
        """Return the names of the YAML files under the base path."""
        return sorted(path.stem for path in self._base_path.glob("*.yaml"))


__all__ = ["ConfigManager"]
