"""Pure partial-update helpers over wire-form (camelCase) brand dictionaries."""

from __future__ import annotations

import copy
from datetime import datetime, timezone
from typing import Any, Mapping, Optional


def deep_merge(base: Mapping[str, Any], patch: Mapping[str, Any]) -> dict:
    """Return a new dict with ``patch`` merged into ``base``.

    Nested mappings merge key by key; lists and scalars replace the base value
    wholesale. Neither input is modified.
    """
    merged = copy.deepcopy(dict(base))
    for key, value in patch.items():
        current = merged.get(key)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds")


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def next_timestamp(previous: Optional[str]) -> str:
    """Current UTC time, never earlier than ``previous``."""
    now = datetime.now(timezone.utc)
    last = _parse_timestamp(previous)
    if last is not None and last > now:
        return previous
    return now.isoformat(timespec="milliseconds")


def stamp_updated(data: Mapping[str, Any], previous: Optional[str] = None) -> dict:
    """Copy of a wire-form configuration with ``metadata.updatedAt`` refreshed."""
    if previous is None:
        previous = (data.get("metadata") or {}).get("updatedAt")
    return deep_merge(data, {"metadata": {"updatedAt": next_timestamp(previous)}})
