from typing import Any, Dict, Mapping

from pydantic import ValidationError


def deep_merge(a: Mapping[str, Any], b: Mapping[str, Any]) -> Mapping[str, Any]:
    out = dict(a)
    for k, v in b.items():
        if k in out and isinstance(out[k], dict) and isinstance(v, dict):
            out[k] = deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def validation_error_parser(
    error: ValidationError, component: str = "config.schema"
) -> list[dict[str, str]]:
    parsed_error = [
        {
            "component": component,
            "path": ".".join(map(str, err["loc"])),
            "message": err["msg"],
            "error_type": err["type"],
        }
        for err in error.errors()
    ]
    return parsed_error


def insert_path(tree: Dict[str, Any], dotted_path: str, value: Any) -> None:
    """Populate ``tree`` with ``value`` located at ``dotted_path``."""

    segments = [segment.strip() for segment in dotted_path.split(".") if segment.strip()]
    if not segments:
        raise ValueError("Override keys must contain at least one non-empty segment")

    cursor: Dict[str, Any] = tree
    for segment in segments[:-1]:
        existing = cursor.get(segment)
        if existing is None:
            next_node: Dict[str, Any] = {}
            cursor[segment] = next_node
            cursor = next_node
        elif isinstance(existing, dict):
            cursor = existing
        else:
            raise ValueError(
                f"Cannot override nested path '{dotted_path}': segment '{segment}' is already a value"
            )

    leaf = segments[-1]
    if isinstance(cursor.get(leaf), dict):
        raise ValueError(f"Cannot assign value to '{dotted_path}': existing node at '{leaf}' is a mapping")
    cursor[leaf] = value

