"""Helpers for reading untyped TOML/YAML/JSON payloads.

Tool arguments and parsed documents arrive as plain objects; these helpers
narrow them without scattering isinstance checks through the services.
"""

from __future__ import annotations

from typing import Mapping, TypeGuard, cast

StrDict = dict[str, object]
ObjList = list[object]


def is_str_dict(obj: object) -> TypeGuard[StrDict]:
    if not isinstance(obj, dict):
        return False
    d = cast(dict[object, object], obj)
    return all(isinstance(k, str) for k in d.keys())


def as_str_dict(obj: object) -> StrDict | None:
    if is_str_dict(obj):
        return obj
    return None


def as_obj_list(obj: object) -> ObjList | None:
    if isinstance(obj, (list, tuple)):
        return list(cast(list[object], obj))
    return None


def get_str(table: Mapping[str, object], key: str) -> str | None:
    """Get a string value, stripped.

    Returns None if missing, not a str, or empty after stripping.
    """
    value = table.get(key)
    if not isinstance(value, str):
        return None
    s = value.strip()
    return s or None


def get_int(table: Mapping[str, object], key: str) -> int | None:
    value = table.get(key)
    # bool is an int subclass; a TOML `true` is never a port number
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def get_table(table: Mapping[str, object], key: str) -> StrDict | None:
    return as_str_dict(table.get(key))


def get_str_list(table: Mapping[str, object], key: str) -> list[str] | None:
    """Get a list of non-empty strings; non-string items are dropped."""
    raw = as_obj_list(table.get(key))
    if raw is None:
        return None
    return [item.strip() for item in raw if isinstance(item, str) and item.strip()]


def get_str_map(table: Mapping[str, object], key: str) -> dict[str, str] | None:
    """Get a str -> str mapping; entries with non-string values are dropped."""
    raw = as_str_dict(table.get(key))
    if raw is None:
        return None
    return {k: v for k, v in raw.items() if isinstance(v, str)}
