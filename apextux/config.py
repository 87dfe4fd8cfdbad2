"""Layered settings: TOML files overlaid by ``APEX_`` environment variables."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

ENV_PREFIX = "APEX_"

_TRUE_WORDS = frozenset({"true", "1", "yes", "on", "y"})
_FALSE_WORDS = frozenset({"false", "0", "no", "off", "n", ""})


class Settings:
    """Nested settings addressed with dotted keys such as ``clock.twelve_hour``."""

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = dict(values or {})

    def __repr__(self) -> str:
        return f"Settings({self._values!r})"

    def get(self, key: str) -> Any:
        """Return the raw value stored under ``key``; raise KeyError if absent."""
        node: Any = self._values
        for part in key.split("."):
            if not isinstance(node, Mapping) or part not in node:
                raise KeyError(key)
            node = node[part]
        return node

    def get_bool(self, key: str) -> bool:
        value = self.get(key)
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return value != 0
        if isinstance(value, str):
            word = value.strip().lower()
            if word in _TRUE_WORDS:
                return True
            if word in _FALSE_WORDS:
                return False
        raise ValueError(f"setting {key!r} is not a boolean: {value!r}")

    def get_str(self, key: str) -> str:
        value = self.get(key)
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (str, int, float)):
            return str(value)
        raise ValueError(f"setting {key!r} is not a string: {value!r}")

    def get_int(self, key: str) -> int:
        value = self.get(key)
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            return round(value)
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                raise ValueError(f"setting {key!r} is not an integer: {value!r}") from None
        raise ValueError(f"setting {key!r} is not an integer: {value!r}")

    def get_float(self, key: str) -> float:
        value = self.get(key)
        if isinstance(value, bool):
            return float(value)
        if isinstance(value, (int, float)):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value.strip())
            except ValueError:
                raise ValueError(f"setting {key!r} is not a number: {value!r}") from None
        raise ValueError(f"setting {key!r} is not a number: {value!r}")


def _merge(target: dict[str, Any], source: Mapping[str, Any]) -> None:
    for key, value in source.items():
        if isinstance(value, Mapping) and isinstance(target.get(key), dict):
            _merge(target[key], value)
        elif isinstance(value, Mapping):
            target[key] = {}
            _merge(target[key], value)
        else:
            target[key] = value


def _resolve(path: str | os.PathLike[str]) -> Path | None:
    candidate = Path(path)
    if candidate.is_file():
        return candidate
    with_suffix = candidate.with_name(candidate.name + ".toml")
    if with_suffix.is_file():
        return with_suffix
    return None


def load_settings(
    paths: Iterable[str | os.PathLike[str]],
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Merge optional TOML files in order, then ``APEX_*`` environment variables.

    A path may be given with or without its ``.toml`` suffix; missing files are
    skipped. In variable names a double underscore separates nested keys, so
    ``APEX_CLOCK__TWELVE_HOUR`` sets ``clock.twelve_hour``.
    """
    values: dict[str, Any] = {}
    for path in paths:
        resolved = _resolve(path)
        if resolved is None:
            continue
        with resolved.open("rb") as handle:
            _merge(values, tomllib.load(handle))

    environment = os.environ if environ is None else environ
    for name, raw in environment.items():
        if not name.startswith(ENV_PREFIX):
            continue
        key = name[len(ENV_PREFIX):].lower()
        if not key:
            continue
        *parents, leaf = key.split("__")
        node = values
        for parent in parents:
            child = node.get(parent)
            if not isinstance(child, dict):
                child = node[parent] = {}
            node = child
        node[leaf] = raw
    return Settings(values)