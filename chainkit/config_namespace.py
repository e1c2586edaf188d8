"""Strict configuration namespace with consumed-keys enforcement."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Iterable

_MISSING = object()


def _join_path(parent: str, key: str) -> str:
    if not parent:
        return key
    return f"{parent}.{key}"


def _normalize_key(key: Any) -> str:
    if not isinstance(key, str) or not key.strip():
        raise TypeError("ConfigNamespace key must be a non-empty string")
    return key.strip()


@dataclass
class ConfigNamespace:
    """Read typed values from a mapping and fail on keys nobody asked for.

    Every getter marks its key as consumed; `assert_consumed` then raises for
    leftovers (typos, stale options) anywhere in the tree of child namespaces.
    """

    data: Mapping[str, Any]
    path: str
    _consumed: set[str] = field(default_factory=set, init=False, repr=False)
    _children: dict[str, "ConfigNamespace"] = field(default_factory=dict, init=False, repr=False)
    _effective: dict[str, Any] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.data, Mapping):
            raise TypeError(
                f"{self.path or '<root>'} must be a mapping (type={type(self.data).__name__})"
            )

    @classmethod
    def empty(cls, *, path: str) -> "ConfigNamespace":
        return cls({}, path=path)

    def consumed_keys(self) -> tuple[str, ...]:
        return tuple(sorted(self._consumed))

    def unconsumed_keys(self) -> tuple[str, ...]:
        return tuple(sorted(str(k) for k in self.data.keys() if k not in self._consumed))

    def assert_consumed(self) -> None:
        unknown = self.unconsumed_keys()
        if unknown:
            consumed = ", ".join(self.consumed_keys()) or "<none>"
            raise ValueError(
                f"Unknown config keys under {self.path or '<root>'}: {', '.join(unknown)} "
                f"(consumed: {consumed})"
            )
        for child in self._children.values():
            child.assert_consumed()

    def effective_values(self) -> dict[str, Any]:
        out = dict(self._effective)
        for key, child in self._children.items():
            child_effective = child.effective_values()
            if child_effective:
                out[key] = child_effective
        return out

    def _get_raw(self, key: str, *, default: Any) -> tuple[str, Any, bool]:
        normalized = _normalize_key(key)
        if normalized in self._children:
            raise ValueError(
                f"{_join_path(self.path, normalized)} already accessed as a nested namespace"
            )
        self._consumed.add(normalized)
        if normalized not in self.data:
            if default is _MISSING:
                raise ValueError(f"Missing required config key: {_join_path(self.path, normalized)}")
            return normalized, default, True
        return normalized, self.data.get(normalized), False

    def namespace(
        self,
        key: str,
        *,
        default: Mapping[str, Any] | None | object = _MISSING,
    ) -> "ConfigNamespace":
        normalized = _normalize_key(key)
        if normalized in self._children:
            return self._children[normalized]

        child_path = _join_path(self.path, normalized)
        raw = self.data.get(normalized)
        self._consumed.add(normalized)

        if raw is None:
            if default is _MISSING:
                raise ValueError(f"Missing required config namespace: {child_path}")
            if default is not None and not isinstance(default, Mapping):
                raise TypeError(f"default for {child_path} must be a mapping or None")
            raw = dict(default) if default is not None else {}

        if not isinstance(raw, Mapping):
            raise TypeError(f"{child_path} must be a mapping (type={type(raw).__name__})")

        child = ConfigNamespace(dict(raw), path=child_path)
        self._children[normalized] = child
        return child

    def get_bool(self, key: str, *, default: bool | object = _MISSING) -> bool:
        if default is not _MISSING and not isinstance(default, bool):
            raise TypeError(f"{_join_path(self.path, key.strip())} default must be a boolean")

        normalized, value, _ = self._get_raw(key, default=default)
        if not isinstance(value, bool):
            raise TypeError(
                f"{_join_path(self.path, normalized)} must be a boolean (type={type(value).__name__})"
            )
        self._effective[normalized] = value
        return value

    def get_str(
        self,
        key: str,
        *,
        default: str | None | object = _MISSING,
        allow_empty: bool = False,
        choices: Iterable[str] | None = None,
    ) -> str | None:
        if default is not _MISSING and default is not None and not isinstance(default, str):
            raise TypeError(f"{_join_path(self.path, key.strip())} default must be a string or None")

        normalized, raw, _ = self._get_raw(key, default=default)
        if raw is None:
            self._effective[normalized] = None
            return None
        if not isinstance(raw, str):
            raise TypeError(
                f"{_join_path(self.path, normalized)} must be a string (type={type(raw).__name__})"
            )

        value = raw.strip()
        if not value and not allow_empty:
            raise ValueError(f"{_join_path(self.path, normalized)} cannot be empty")
        if choices is not None:
            allowed = tuple(str(item) for item in choices)
            if value not in allowed:
                raise ValueError(
                    f"{_join_path(self.path, normalized)} must be one of: "
                    f"{', '.join(allowed) or '<none>'} (got {value!r})"
                )
        self._effective[normalized] = value
        return value

    def get_list_str(
        self,
        key: str,
        *,
        default: list[str] | tuple[str, ...] | object = _MISSING,
        allow_empty: bool = False,
    ) -> list[str]:
        if default is not _MISSING and not isinstance(default, (list, tuple)):
            raise TypeError(f"{_join_path(self.path, key.strip())} default must be a list[str]")

        normalized, raw, _ = self._get_raw(key, default=default)
        item_path = _join_path(self.path, normalized)
        if not isinstance(raw, (list, tuple)):
            raise TypeError(f"{item_path} must be a list[str] (type={type(raw).__name__})")

        items: list[str] = []
        for idx, item in enumerate(raw):
            if not isinstance(item, str):
                raise TypeError(f"{item_path}[{idx}] must be a string (type={type(item).__name__})")
            trimmed = item.strip()
            if not trimmed:
                raise ValueError(f"{item_path}[{idx}] cannot be empty")
            items.append(trimmed)

        if not items and not allow_empty:
            raise ValueError(f"{item_path} cannot be empty")

        self._effective[normalized] = list(items)
        return items
