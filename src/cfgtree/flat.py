"""Configuration backend over a flat map of dotted paths to strings.

Lists are encoded with a ``size`` entry followed by indexed entries::

    ports.size = 2          servers.size = 1
    ports.0 = 5432          servers.0.host = a.example
    ports.1 = 5433          servers.0.port = 80

The ``size`` segment is reserved for this encoding. Values of this backend
only support string and list reads; typed reads through
``cfgtree.accessors.get_as`` fail with ``UnsupportedConversionError``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from cfgtree.errors import ConfigPathNotFoundError, ConfigShapeMismatchError, ConfigurationError
from cfgtree.paths import SEPARATOR, is_index, join_path, split_path
from cfgtree.tree import LEAF, OBJECT, OBJECT_LIST, STRING, STRING_LIST, normalize_tree

__all__ = ["MapConfig", "MapConfigValue"]

logger = logging.getLogger(__name__)

SIZE = "size"


def _list_size(data: Mapping[str, str], key: str, path: str) -> int:
    raw = data[join_path(key, SIZE)]
    try:
        size = int(raw)
    except ValueError as e:
        raise ConfigurationError(f"Property {path}.{SIZE} must be a number, got {raw!r}", cause=e) from e
    if size < 0:
        raise ConfigurationError(f"Property {path}.{SIZE} must not be negative, got {raw!r}")
    return size


class MapConfigValue:
    """A leaf of a MapConfig. Supports string and list reads only."""

    def __init__(self, data: Mapping[str, str], key: str, path: str, shape: str) -> None:
        self._data = data
        self._key = key
        self._path = path
        self._shape = shape

    def get_string(self) -> str:
        if self._shape != STRING:
            raise ConfigShapeMismatchError(path=self._path, expected=STRING, actual=self._shape)
        return self._data[self._key]

    def get_list(self) -> list[str]:
        if self._shape != STRING_LIST:
            raise ConfigShapeMismatchError(path=self._path, expected=STRING_LIST, actual=self._shape)
        items: list[str] = []
        for index in range(_list_size(self._data, self._key, self._path)):
            item_key = join_path(self._key, str(index))
            if item_key not in self._data:
                raise ConfigPathNotFoundError(path=join_path(self._path, str(index)))
            items.append(self._data[item_key])
        return items

    def __repr__(self) -> str:
        return f"MapConfigValue(path={self._path!r}, shape={self._shape!r})"


class MapConfig:
    """Read-only config node over a flat ``{dotted.path: string}`` map.

    Args:
        data: Flat map of full dotted paths to string values. It is copied,
            so later changes to ``data`` are not visible through the node.

    Raises:
        ConfigurationError: If a value is not a string, a path is malformed,
            or a path is both a value and the parent of other paths.
    """

    def __init__(self, data: Mapping[str, str] | None = None) -> None:
        flat: dict[str, str] = {}
        for key, value in (data or {}).items():
            if not isinstance(value, str):
                raise ConfigurationError(f"Property {key} must be a string, got {type(value).__name__}")
            if split_path(key) is None:
                raise ConfigurationError(f"Invalid property path {key!r}")
            flat[key] = value
        children = _index_children(flat)
        conflicts = sorted(flat.keys() & children.keys())
        if conflicts:
            raise ConfigurationError(f"Property {conflicts[0]} is both a value and an object")
        self._data: dict[str, str] = flat
        self._children: dict[str, set[str]] = children
        self._object_lists: frozenset[str] = _find_object_lists(flat, children)
        self._path = ""

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> MapConfig:
        """Flatten an already-loaded nested mapping into a MapConfig.

        Raises:
            ConfigurationError: If the mapping uses the reserved ``size`` key,
                contains an empty object, or cannot be normalized (see
                ``cfgtree.tree.normalize_tree``).
        """
        flat: dict[str, str] = {}
        _flatten(normalize_tree(data), "", flat)
        logger.debug(f"Flattened configuration into {len(flat)} entries")
        return cls(flat)

    def _child(self, key: str) -> MapConfig:
        node = MapConfig.__new__(MapConfig)
        node._data = self._data
        node._children = self._children
        node._object_lists = self._object_lists
        node._path = key
        return node

    def _has_children(self, key: str) -> bool:
        return bool(key) and key in self._children

    def _is_object_list(self, key: str) -> bool:
        return key in self._object_lists

    def _shape_of_key(self, key: str) -> str | None:
        if key in self._data:
            return STRING
        if join_path(key, SIZE) in self._data:
            return OBJECT_LIST if self._is_object_list(key) else STRING_LIST
        if self._has_children(key):
            return OBJECT
        return None

    def _locate(self, path: str) -> tuple[str, str | None]:
        """Return the full key for ``path`` and its shape, or None if it does not resolve."""
        key = join_path(self._path, path)
        segments = split_path(path)
        if segments is None or SIZE in segments:
            return key, None
        for depth in range(1, len(segments)):
            ancestor = join_path(self._path, SEPARATOR.join(segments[:depth]))
            if ancestor in self._data:
                return key, None
            if join_path(ancestor, SIZE) in self._data and not self._is_object_list(ancestor):
                return key, None
        return key, self._shape_of_key(key)

    def property(self, path: str) -> MapConfigValue:
        value = self.property_or_none(path)
        if value is None:
            raise ConfigPathNotFoundError(path=path)
        return value

    def property_or_none(self, path: str) -> MapConfigValue | None:
        key, shape = self._locate(path)
        if shape is None:
            return None
        if shape not in (STRING, STRING_LIST):
            raise ConfigShapeMismatchError(path=path, expected=LEAF, actual=shape)
        return MapConfigValue(self._data, key, path, shape)

    def config(self, path: str) -> MapConfig:
        key, shape = self._locate(path)
        if shape is None:
            raise ConfigPathNotFoundError(path=path)
        if shape != OBJECT:
            raise ConfigShapeMismatchError(path=path, expected=OBJECT, actual=shape)
        return self._child(key)

    def config_list(self, path: str) -> list[MapConfig]:
        key, shape = self._locate(path)
        if shape is None:
            raise ConfigPathNotFoundError(path=path)
        if shape not in (OBJECT_LIST, STRING_LIST):
            raise ConfigShapeMismatchError(path=path, expected=OBJECT_LIST, actual=shape)
        size = _list_size(self._data, key, path)
        if shape == STRING_LIST and size > 0:
            raise ConfigShapeMismatchError(path=path, expected=OBJECT_LIST, actual=STRING_LIST)
        nodes: list[MapConfig] = []
        for index in range(size):
            element = join_path(key, str(index))
            if not self._has_children(element):
                raise ConfigPathNotFoundError(path=join_path(path, str(index)))
            nodes.append(self._child(element))
        return nodes

    def keys(self) -> set[str]:
        result: set[str] = set()
        self._collect_keys(self._path, "", result)
        return result

    def _collect_keys(self, key: str, relative: str, out: set[str]) -> None:
        for segment in self._children.get(key, ()):
            if segment == SIZE:
                continue
            child_key = join_path(key, segment)
            child_relative = join_path(relative, segment)
            if self._shape_of_key(child_key) in (STRING, STRING_LIST):
                out.add(child_relative)
            else:
                self._collect_keys(child_key, child_relative, out)

    def to_map(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for segment in self._children.get(self._path, ()):
            if segment == SIZE:
                continue
            key = join_path(self._path, segment)
            shape = self._shape_of_key(key)
            if shape == STRING:
                result[segment] = self._data[key]
            elif shape == STRING_LIST:
                result[segment] = MapConfigValue(self._data, key, segment, shape).get_list()
            elif shape == OBJECT_LIST:
                result[segment] = [node.to_map() for node in self.config_list(segment)]
            else:
                result[segment] = self._child(key).to_map()
        return result

    def __repr__(self) -> str:
        return f"MapConfig(path={self._path!r}, children={len(self._children.get(self._path, ()))})"


def _index_children(flat: Mapping[str, str]) -> dict[str, set[str]]:
    """Map every ancestor path (``""`` for the root) to its immediate child segments."""
    children: dict[str, set[str]] = {}
    for key in flat:
        parent = ""
        for segment in key.split(SEPARATOR):
            children.setdefault(parent, set()).add(segment)
            parent = join_path(parent, segment)
    return children


def _find_object_lists(flat: Mapping[str, str], children: Mapping[str, set[str]]) -> frozenset[str]:
    """Return the list paths whose elements are objects.

    A list is an array of objects when any element in ``range(size)`` has
    child entries, so leading empty or missing elements do not hide it.
    """
    marker = SEPARATOR + SIZE
    object_lists: set[str] = set()
    for key, raw in flat.items():
        if not key.endswith(marker):
            continue
        base = key[: -len(marker)]
        try:
            size = int(raw)
        except ValueError:
            continue
        if any(
            is_index(segment) and int(segment) < size and join_path(base, segment) in children
            for segment in children.get(base, ())
        ):
            object_lists.add(base)
    return frozenset(object_lists)


def _flatten(data: dict[str, Any], prefix: str, out: dict[str, str]) -> None:
    for segment, value in data.items():
        if segment == SIZE:
            raise ConfigurationError(f"Key '{SIZE}' is reserved for list encoding: {join_path(prefix, segment)}")
        path = join_path(prefix, segment)
        if isinstance(value, str):
            out[path] = value
        elif isinstance(value, dict):
            _flatten_object(value, path, out)
        else:
            out[join_path(path, SIZE)] = str(len(value))
            for index, item in enumerate(value):
                item_path = join_path(path, str(index))
                if isinstance(item, dict):
                    _flatten_object(item, item_path, out)
                else:
                    out[item_path] = item


def _flatten_object(data: dict[str, Any], path: str, out: dict[str, str]) -> None:
    if not data:
        raise ConfigurationError(f"Property {path} is an empty object, which a flat map cannot represent")
    _flatten(data, path, out)
