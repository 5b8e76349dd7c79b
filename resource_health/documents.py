# SPDX-License-Identifier: MIT

"""Input normalisation and typed access to nested resource documents."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping

from dateutil import parser as date_parser

from resource_health.exceptions import ResourceConversionError, UnsupportedResourceError


def to_document(resource: Any) -> dict[str, Any]:
    """Return a plain dict for a mapping or a kubernetes client model object."""
    if isinstance(resource, Mapping):
        return dict(resource)
    if hasattr(resource, "openapi_types") and hasattr(resource, "to_dict"):
        from kubernetes.client import ApiClient

        return ApiClient().sanitize_for_serialization(resource)
    raise ResourceConversionError(f"cannot evaluate object of type {type(resource).__name__}")


def split_api_version(api_version: str) -> tuple[str, str]:
    if "/" in api_version:
        group, version = api_version.split("/", 1)
        return group, version
    return "", api_version


def gvk(obj: Mapping[str, Any]) -> tuple[str, str, str]:
    api_version = obj.get("apiVersion") or ""
    kind = obj.get("kind") or ""
    if not isinstance(api_version, str) or not isinstance(kind, str):
        raise ResourceConversionError("apiVersion and kind must be strings")
    group, version = split_api_version(api_version)
    return group, version, kind


def _walk(obj: Mapping[str, Any], path: tuple[str, ...]) -> Any:
    current: Any = obj
    for i, key in enumerate(path):
        if current is None:
            return None
        if not isinstance(current, Mapping):
            raise ResourceConversionError(
                f".{'.'.join(path[:i])} accessor error: {current!r} is of type "
                f"{type(current).__name__}, expected map",
            )
        current = current.get(key)
    return current


def nested(obj: Mapping[str, Any], *path: str) -> Any:
    return _walk(obj, path)


def nested_str(obj: Mapping[str, Any], *path: str, default: str = "") -> str:
    value = _walk(obj, path)
    if value is None:
        return default
    if not isinstance(value, str):
        raise ResourceConversionError(
            f".{'.'.join(path)} accessor error: {value!r} is of type {type(value).__name__}, expected string",
        )
    return value


def nested_int(obj: Mapping[str, Any], *path: str, default: int = 0) -> int:
    value = _walk(obj, path)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)) or int(value) != value:
        raise ResourceConversionError(
            f".{'.'.join(path)} accessor error: {value!r} is of type {type(value).__name__}, expected int",
        )
    return int(value)


def nested_bool(obj: Mapping[str, Any], *path: str, default: bool = False) -> bool:
    value = _walk(obj, path)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ResourceConversionError(
            f".{'.'.join(path)} accessor error: {value!r} is of type {type(value).__name__}, expected bool",
        )
    return value


def nested_map(obj: Mapping[str, Any], *path: str) -> dict[str, Any]:
    value = _walk(obj, path)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ResourceConversionError(
            f".{'.'.join(path)} accessor error: {value!r} is of type {type(value).__name__}, expected map",
        )
    return dict(value)


def nested_list(obj: Mapping[str, Any], *path: str) -> list[Any]:
    value = _walk(obj, path)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ResourceConversionError(
            f".{'.'.join(path)} accessor error: {value!r} is of type {type(value).__name__}, expected list",
        )
    return value


def nested_maps(obj: Mapping[str, Any], *path: str) -> list[dict[str, Any]]:
    """A list of mappings; entries that are not mappings are a conversion error."""
    items = nested_list(obj, *path)
    for item in items:
        if not isinstance(item, Mapping):
            raise ResourceConversionError(
                f".{'.'.join(path)} accessor error: {item!r} is of type {type(item).__name__}, expected map",
            )
    return items


def parse_time(value: Any) -> datetime | None:
    """Parse an RFC3339 timestamp into an aware UTC datetime.

    Empty values give ``None``; anything unparsable raises
    ``UnsupportedResourceError``.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        ts = value
    else:
        try:
            ts = date_parser.isoparse(str(value))
        except (ValueError, OverflowError) as exc:
            raise UnsupportedResourceError(f"failed to parse time {value!r}: {exc}") from exc
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def nested_time(obj: Mapping[str, Any], *path: str) -> datetime | None:
    value = _walk(obj, path)
    try:
        return parse_time(value)
    except UnsupportedResourceError as exc:
        raise UnsupportedResourceError(f"failed to parse {'.'.join(path)} ({value}): {exc}") from exc


def creation_timestamp(obj: Mapping[str, Any]) -> datetime | None:
    return nested_time(obj, "metadata", "creationTimestamp")


def deletion_timestamp(obj: Mapping[str, Any]) -> datetime | None:
    return nested_time(obj, "metadata", "deletionTimestamp")


def find_condition(conditions: list[dict[str, Any]], condition_type: str) -> dict[str, Any] | None:
    for cond in conditions:
        if cond.get("type") == condition_type:
            return cond
    return None


def find_status_field(obj: Mapping[str, Any]) -> str:
    """First status-like string field of a flat cloud document.

    Keys named ``status`` or ``state`` (any case) win over keys that merely
    end in ``status``; nested ``{"Name": ...}`` values, as EC2 reports its
    state, are unwrapped.
    """
    exact = [k for k in obj if k.lower() in ("status", "state")]
    suffixed = [k for k in obj if k.lower().endswith("status") and k not in exact]
    for key in exact + suffixed:
        value = obj[key]
        if isinstance(value, Mapping):
            value = value.get("Name") or value.get("name")
        if isinstance(value, str) and value:
            return value
    return ""
