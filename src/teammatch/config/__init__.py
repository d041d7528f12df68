"""YAML settings files for the CLI and container."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

CONFIG_SUFFIX = ".yaml"


class ConfigManager:
    """Reads ``<name>.yaml`` settings files from one directory.

    The mapping returned is raw; :func:`teammatch.schemas.config.load_config`
    validates it into ranking, embedding, matching, agent and llm sections.
    """

    def __init__(self, base_path: str | Path):
        self._base_path = Path(base_path)

    @classmethod
    def load_file(cls, path: str | Path) -> dict[str, Any]:
        """Load a settings file given its full path. Only ``.yaml`` is accepted."""
        path = Path(path)
        if path.suffix != CONFIG_SUFFIX:
            raise ValueError(f"Config file must have a {CONFIG_SUFFIX} extension: {path.name}")
        return cls(path.parent).load(path.stem)

    def load(self, name: str) -> dict[str, Any]:
        """Load ``name`` (no extension); an empty file yields ``{}``."""
        path = self._base_path / f"{name}{CONFIG_SUFFIX}"
        with path.open("r", encoding="utf-8") as handle:
            return yaml.safe_load(handle) or {}


__all__ = ["CONFIG_SUFFIX", "ConfigManager"]
