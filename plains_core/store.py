"""Namespaced key/value store exposing loaded configuration to workers."""

from __future__ import annotations

from typing import Any, Mapping

from .errors import ConfigurationError

__all__ = ["Store"]


class Store:
    """Process-wide holder of configuration sections keyed by namespace."""

    def __init__(self) -> None:
        self._namespaces: dict[str, Any] = {}

    def create(self, namespace: str, value: Any) -> None:
        """Register ``value`` under ``namespace``; each namespace is created once."""
        if not namespace:
            raise ConfigurationError("store namespace cannot be empty")
        if namespace in self._namespaces:
            raise ConfigurationError(f"store namespace {namespace!r} already exists")
        self._namespaces[namespace] = value

    def has(self, namespace: str) -> bool:
        return namespace in self._namespaces

    def get(self, namespace: str, key: str | None = None, default: Any | None = None) -> Any | None:
        """Return the namespace value, or one ``key`` of it when given.

        Keys are looked up as mapping items first and attributes second, so
        both plain dictionaries and typed configuration objects can be stored.
        """
        if namespace not in self._namespaces:
            return default
        value = self._namespaces[namespace]
        if key is None:
            return value
        if isinstance(value, Mapping):
            return value.get(key, default)
        return getattr(value, key, default)

    def namespaces(self) -> tuple[str, ...]:
        return tuple(self._namespaces)
