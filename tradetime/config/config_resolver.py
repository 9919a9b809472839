"""
Purpose:
    - Merge configuration layers (defaults, file, cli)
    - Validate the merged mapping against ``Config``
    - Hash and count the resolved config, and report it through telemetry
"""

import copy
import hashlib
import json
from typing import Any, Mapping, MutableMapping, NoReturn, Optional, Sequence

from pydantic import ValidationError

from tradetime.config.defaults import DEFAULT_CONFIG
from tradetime.config.models import Config, ReturnConfig
from tradetime.ports.telemetry import Telemetry
from tradetime.schedule.errors import ConfigurationError
from tradetime.utils.utility import deep_merge, validation_error_parser

ALLOWED_KEYS: set[str] = set(Config.model_fields.keys())
# ``--set`` delivers strings; these paths accept "a,b,c" for a list
LIST_STRING_PATHS: set[tuple[str, ...]] = {
    ("display", "reference_zones"),
}


class ConfigResolver:
    def __init__(self, telemetry: Telemetry) -> None:
        self.telemetry = telemetry

    # --- pipeline (resolve) ---------------------------------

    def resolve(
        self,
        defaults: Optional[Mapping[str, Any]] = None,
        file_cfg: Optional[Mapping[str, Any]] = None,
        cli_overrides: Optional[Mapping[str, Any]] = None,
    ) -> ReturnConfig:
        """
        1. Validate defaults and merge file, then CLI layers on top
        2. Check top-level keys, normalize string-typed overrides
        3. Validate the merged mapping into ``Config``
        4. Hash, count leaves, emit ``config_resolved``
        """
        base = copy.deepcopy(dict(DEFAULT_CONFIG if defaults is None else defaults))
        try:
            config: Mapping[str, Any] = Config(**base).model_dump(mode="json")
        except ValidationError as e:
            self._fail("defaults_validation", validation_error_parser(e, "config.defaults"), e)

        for layer in [file_cfg, cli_overrides]:
            if layer is not None:
                config = deep_merge(config, copy.deepcopy(dict(layer)))

        self._check_keys(config)
        config = self._normalize_config(config)

        try:
            validated = Config(**config)
        except ValidationError as e:
            self._fail("merged_validation", validation_error_parser(e), e)

        internal_config: Mapping[str, Any] = self._sort_mapping(validated.model_dump(mode="json"))
        config_hash = self.compute_hash(internal_config)
        config_keys_total = len(self._collect_leaves(internal_config))

        self.telemetry.log(
            event="config_resolved",
            config_hash=config_hash,
            config_keys_total=config_keys_total,
            timezone=validated.timezone,
            macros=len(validated.macros),
            killzones=len(validated.killzones),
            market_sessions=len(validated.market_sessions),
            news_instances=len(validated.news_instances),
        )

        return ReturnConfig(
            config=validated,
            internal_config=internal_config,
            config_hash=config_hash,
            config_keys_total=config_keys_total,
        )

    # --- schema (validation/normalization) ------------------

    def _fail(self, step: str, errors: list[dict[str, Any]], exc: Exception) -> NoReturn:
        self.telemetry.log(
            event="config_validation_error",
            layer="schema",
            step=step,
            errors=errors,
        )
        first = errors[0] if errors else {}
        raise ConfigurationError(
            f"Invalid configuration ({step}): "
            + "; ".join(f"{e.get('path')}: {e.get('message')}" for e in errors),
            field=first.get("path"),
            details={"step": step, "errors": errors},
        ) from exc

    def _check_keys(self, cfg: Mapping[str, Any]) -> None:
        unexpected = set(cfg) - ALLOWED_KEYS
        if unexpected:
            keys = sorted(unexpected)
            self.telemetry.log(
                event="config_validation_error",
                layer="schema",
                step="unexpected_keys",
                errors=[
                    {
                        "code": "CFG-003",
                        "path": None,
                        "message": f"unexpected key(s): {', '.join(keys)}",
                        "keys": keys,
                    }
                ],
            )
            raise ConfigurationError(
                f"Unexpected config key(s): {', '.join(keys)}", field=keys[0]
            )

    def _normalize_config(self, cfg: Mapping[str, Any]) -> dict[str, Any]:
        """
        Return a deep-copied configuration with list-typed CLI strings split.
        Keeps callers' original mappings untouched.
        """
        normalized: dict[str, Any] = copy.deepcopy(dict(cfg))

        for path in LIST_STRING_PATHS:
            parent: MutableMapping[str, Any] | None = normalized
            for segment in path[:-1]:
                next_node = parent.get(segment) if parent is not None else None
                parent = next_node if isinstance(next_node, MutableMapping) else None
            if parent is None:
                continue

            leaf = path[-1]
            value = parent.get(leaf)
            if isinstance(value, str):
                parent[leaf] = [item.strip() for item in value.split(",") if item.strip()]

        return normalized

    # --- render (hashing, counting) -------------------------

    def _sort_mapping(self, obj: Any) -> Any:
        if isinstance(obj, Mapping):
            return {k: self._sort_mapping(obj[k]) for k in sorted(obj)}
        if isinstance(obj, Sequence) and not isinstance(obj, (str, bytes, bytearray)):
            return [self._sort_mapping(item) for item in obj]
        return obj

    def compute_hash(self, cfg: Mapping[str, Any]) -> str:
        canonical = self._sort_mapping(cfg)
        payload = json.dumps(canonical, separators=(",", ":"), ensure_ascii=True)
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()

    def _collect_leaves(
        self, tree: Mapping[str, Any], *, _prefix: tuple[str, ...] = ()
    ) -> list[str]:
        """
        Return flattened key paths for every non-mapping value in ``tree``.

        Lists count as a single leaf keyed by the full dotted path
        (e.g. ``("display", "reference_zones")`` -> ``"display.reference_zones"``).
        """
        leaves: list[str] = []
        for key, value in tree.items():
            path = _prefix + (str(key),)
            if isinstance(value, Mapping):
                leaves.extend(self._collect_leaves(value, _prefix=path))
            else:
                leaves.append(".".join(path))
        return leaves
