"""Typed accessors and absence-tolerant readers built on the config protocols."""

from __future__ import annotations

from typing import Any, TypeVar, overload

from cfgtree.errors import UnsupportedConversionError
from cfgtree.interfaces import ConfigNode, ConfigValue, SerializableConfigValue

__all__ = [
    "get_as",
    "property_as",
    "property_as_or_none",
    "try_get_string",
    "try_get_string_list",
]

E = TypeVar("E")


@overload
def get_as(value: ConfigValue, target: type[E]) -> E: ...


@overload
def get_as(value: ConfigValue, target: Any) -> Any: ...


def get_as(value: ConfigValue, target: Any) -> Any:
    """Convert a config value to ``target``.

    ``str`` is served by ``get_string()`` directly. Any other target requires
    the value to implement ``SerializableConfigValue``.

    Raises:
        UnsupportedConversionError: If ``target`` is not ``str`` and the
            backend does not support deserialization.
    """
    if target is str:
        return value.get_string()
    if not isinstance(value, SerializableConfigValue):
        raise UnsupportedConversionError()
    return value.get_as(target)


@overload
def property_as(node: ConfigNode, path: str, target: type[E]) -> E: ...


@overload
def property_as(node: ConfigNode, path: str, target: Any) -> Any: ...


def property_as(node: ConfigNode, path: str, target: Any) -> Any:
    """Read the required property at ``path`` converted to ``target``."""
    return get_as(node.property(path), target)


@overload
def property_as_or_none(node: ConfigNode, path: str, target: type[E]) -> E | None: ...


@overload
def property_as_or_none(node: ConfigNode, path: str, target: Any) -> Any: ...


def property_as_or_none(node: ConfigNode, path: str, target: Any) -> Any:
    """Read the optional property at ``path`` converted to ``target``, or None if absent."""
    value = node.property_or_none(path)
    if value is None:
        return None
    return get_as(value, target)


def try_get_string(node: ConfigNode, key: str) -> str | None:
    """Read the string at ``key``, or None if the key is missing."""
    value = node.property_or_none(key)
    return value.get_string() if value is not None else None


def try_get_string_list(node: ConfigNode, key: str) -> list[str] | None:
    """Read the string list at ``key``, or None if the key is missing."""
    value = node.property_or_none(key)
    return value.get_list() if value is not None else None
