"""CatalogProvider Port Interface.

Contract: Supply the whole, read-only event catalog (including the viewer's
IANA zone) on every invocation. A provider may return a different catalog on
each call; the engine honours it on the very next tick and caches nothing.
"""

from __future__ import annotations

from typing import Protocol

from tradetime.schedule.types import Catalog


class CatalogProvider(Protocol):
    def get_catalog(self) -> Catalog: ...
