"""
Purpose:
    - Loads a TOML config file into a plain mapping (one layer for ConfigResolver)
"""

import tomllib
from pathlib import Path
from typing import Any

from tradetime.schedule.errors import ConfigurationError


class ConfigLoader:
    """
    Config-loader; loading toml file.
    """

    def __init__(self, base_dir: str = ".") -> None:
        self._base_dir = base_dir

    def resolve_path(self, file_name: str | Path) -> Path:
        path = Path(file_name)
        if not path.is_absolute():
            path = Path(self._base_dir) / path
        return path

    def load(self, file_name: str | Path) -> dict[str, Any]:
        path = self.resolve_path(file_name)

        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        try:
            with path.open("rb") as f:
                return tomllib.load(f)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigurationError(
                f"Malformed TOML in {path}: {exc}", field="file", value=path
            ) from exc
