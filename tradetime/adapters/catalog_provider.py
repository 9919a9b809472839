from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Optional

from tradetime.config.config_loader import ConfigLoader
from tradetime.config.config_resolver import ConfigResolver
from tradetime.config.models import ReturnConfig
from tradetime.schedule.errors import ConfigurationError
from tradetime.schedule.types import Catalog

_LOGGER = logging.getLogger(__name__)


class StaticCatalogProvider:
    """Serves one catalog for the lifetime of the process."""

    def __init__(self, catalog: Catalog) -> None:
        self._catalog = catalog

    def get_catalog(self) -> Catalog:
        return self._catalog


class FileCatalogProvider:
    """
    Serves the catalog resolved from a TOML file, re-resolving it whenever the
    file's modification time changes.

    A reload that fails validation keeps the last good catalog; a failure on the
    very first load propagates.
    """

    def __init__(
        self,
        path: str | Path,
        resolver: ConfigResolver,
        loader: Optional[ConfigLoader] = None,
        cli_overrides: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._loader = loader or ConfigLoader()
        self._path = self._loader.resolve_path(path)
        self._resolver = resolver
        self._cli_overrides = cli_overrides
        self._mtime_ns: Optional[int] = None
        self._resolved: Optional[ReturnConfig] = None

    def _reload(self, mtime_ns: int) -> ReturnConfig:
        file_cfg = self._loader.load(self._path)
        resolved = self._resolver.resolve(file_cfg=file_cfg, cli_overrides=self._cli_overrides)
        self._resolved = resolved
        self._mtime_ns = mtime_ns
        _LOGGER.info(
            "catalog_reloaded",
            extra={
                "event": "catalog_reloaded",
                "path": str(self._path),
                "config_hash": resolved.config_hash,
            },
        )
        return resolved

    def current(self) -> ReturnConfig:
        """Latest good resolution of the file, reloading first when it changed."""
        mtime_ns = self._path.stat().st_mtime_ns
        if self._resolved is None:
            return self._reload(mtime_ns)
        if mtime_ns != self._mtime_ns:
            try:
                return self._reload(mtime_ns)
            except ConfigurationError as exc:
                # remember the bad mtime so the same broken file is not re-parsed every tick
                self._mtime_ns = mtime_ns
                _LOGGER.error(
                    "catalog_reload_failed",
                    extra={
                        "event": "catalog_reload_failed",
                        "path": str(self._path),
                        "error": str(exc),
                    },
                )
        return self._resolved

    def get_catalog(self) -> Catalog:
        return self.current().config.to_catalog()
