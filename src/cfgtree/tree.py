"""Configuration backend over an already-loaded nested mapping."""

from __future__ import annotations

import copy
import datetime
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import TypeAdapter, ValidationError

from cfgtree.errors import (
    ConfigConversionError,
    ConfigPathNotFoundError,
    ConfigShapeMismatchError,
    ConfigurationError,
)
from cfgtree.paths import SEPARATOR, is_index, join_path, split_path

__all__ = ["TreeConfig", "TreeConfigValue", "normalize_tree"]

logger = logging.getLogger(__name__)

_MISSING = object()

STRING = "a string"
STRING_LIST = "a list of strings"
OBJECT = "an object"
OBJECT_LIST = "a list of objects"
LEAF = "a string or a list of strings"


def normalize_tree(data: Mapping[str, Any]) -> dict[str, Any]:
    """Normalize a loaded mapping into strings, string lists, dicts and lists of dicts.

    Scalars are stringified (booleans as ``"true"``/``"false"``), null entries
    are dropped.

    Raises:
        ConfigurationError: On keys containing the path separator, on mixed or
            nested sequences, and on values of unsupported types.
    """
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"Configuration root must be a mapping, got {type(data).__name__}")
    return _normalize_mapping(data, "")


def _normalize_mapping(data: Mapping[Any, Any], path: str) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, raw in data.items():
        segment = str(key)
        if not segment or SEPARATOR in segment:
            raise ConfigurationError(
                f"Invalid key {segment!r} in {path or '<root>'}: keys must be non-empty and must not contain '.'"
            )
        child_path = join_path(path, segment)
        if raw is None:
            logger.debug(f"Dropping null configuration entry '{child_path}'")
            continue
        result[segment] = _normalize_value(raw, child_path)
    return result


def _normalize_value(raw: Any, path: str) -> Any:
    if isinstance(raw, Mapping):
        return _normalize_mapping(raw, path)
    if isinstance(raw, (list, tuple)):
        if raw and all(isinstance(item, Mapping) for item in raw):
            return [_normalize_mapping(item, join_path(path, str(i))) for i, item in enumerate(raw)]
        if all(_is_scalar(item) for item in raw):
            return [_scalar_to_string(item) for item in raw]
        raise ConfigurationError(f"Property {path} must be a list of scalars or a list of objects")
    if _is_scalar(raw):
        return _scalar_to_string(raw)
    raise ConfigurationError(f"Property {path} has unsupported type {type(raw).__name__}")


def _is_scalar(value: Any) -> bool:
    return isinstance(value, (str, bool, int, float, datetime.date, datetime.time))


def _scalar_to_string(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    return str(value)


def _is_object_list(value: Any) -> bool:
    return isinstance(value, list) and bool(value) and isinstance(value[0], dict)


def _shape(value: Any) -> str:
    if isinstance(value, str):
        return STRING
    if isinstance(value, dict):
        return OBJECT
    if _is_object_list(value):
        return OBJECT_LIST
    return STRING_LIST


def _is_json_document(raw: Any) -> bool:
    return isinstance(raw, str) and raw.lstrip()[:1] in ("{", "[")


class TreeConfigValue:
    """A leaf of a TreeConfig, convertible to arbitrary types with pydantic."""

    def __init__(self, path: str, raw: str | list[str]) -> None:
        self._path = path
        self._raw: str | tuple[str, ...] = raw if isinstance(raw, str) else tuple(raw)

    def get_string(self) -> str:
        if not isinstance(self._raw, str):
            raise ConfigShapeMismatchError(path=self._path, expected=STRING, actual=STRING_LIST)
        return self._raw

    def get_list(self) -> list[str]:
        if isinstance(self._raw, str):
            raise ConfigShapeMismatchError(path=self._path, expected=STRING_LIST, actual=STRING)
        return list(self._raw)

    def get_as(self, target: Any) -> Any:
        """Convert the value with ``pydantic.TypeAdapter(target)`` in lax mode.

        A scalar that does not validate as-is but looks like a JSON document
        (starts with ``{`` or ``[``) is parsed as JSON, so a leaf can carry a
        whole record.

        Raises:
            ConfigConversionError: If validation fails; the pydantic error is
                attached as ``cause``.
        """
        raw: Any = self._raw if isinstance(self._raw, str) else list(self._raw)
        logger.debug(f"Converting property '{self._path}' to {target!r}")
        adapter = TypeAdapter(target)
        try:
            return adapter.validate_python(raw)
        except ValidationError as e:
            if not _is_json_document(raw):
                raise ConfigConversionError(path=self._path, target=target, cause=e) from e
        try:
            return adapter.validate_json(raw)
        except ValidationError as e:
            raise ConfigConversionError(path=self._path, target=target, cause=e) from e

    def __repr__(self) -> str:
        return f"TreeConfigValue(path={self._path!r}, value={self._raw!r})"


class TreeConfig:
    """Read-only config node over a nested mapping.

    The mapping is normalized once at construction (see ``normalize_tree``);
    child nodes share that snapshot and nothing exposes it without copying,
    so instances are safe to share between threads.

    Example:
        config = TreeConfig({"db": {"host": "localhost", "ports": [5432, 5433]}})
        config.config("db").property("host").get_string()  # "localhost"
        config.keys()  # {"db.host", "db.ports"}
    """

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = normalize_tree(data if data is not None else {})

    @classmethod
    def _wrap(cls, normalized: dict[str, Any]) -> TreeConfig:
        node = cls.__new__(cls)
        node._data = normalized
        return node

    def _resolve(self, path: str) -> Any:
        segments = split_path(path)
        if segments is None:
            return _MISSING
        current: Any = self._data
        for segment in segments:
            if isinstance(current, dict):
                if segment not in current:
                    return _MISSING
                current = current[segment]
            elif _is_object_list(current) and is_index(segment):
                index = int(segment)
                if index >= len(current):
                    return _MISSING
                current = current[index]
            else:
                # Below a leaf, or a non-index segment into an array of objects.
                return _MISSING
        return current

    def property(self, path: str) -> TreeConfigValue:
        value = self.property_or_none(path)
        if value is None:
            raise ConfigPathNotFoundError(path=path)
        return value

    def property_or_none(self, path: str) -> TreeConfigValue | None:
        value = self._resolve(path)
        if value is _MISSING:
            return None
        shape = _shape(value)
        if shape not in (STRING, STRING_LIST):
            raise ConfigShapeMismatchError(path=path, expected=LEAF, actual=shape)
        return TreeConfigValue(path, value)

    def config(self, path: str) -> TreeConfig:
        value = self._resolve(path)
        if value is _MISSING:
            raise ConfigPathNotFoundError(path=path)
        if not isinstance(value, dict):
            raise ConfigShapeMismatchError(path=path, expected=OBJECT, actual=_shape(value))
        return self._wrap(value)

    def config_list(self, path: str) -> list[TreeConfig]:
        value = self._resolve(path)
        if value is _MISSING:
            raise ConfigPathNotFoundError(path=path)
        if not isinstance(value, list):
            raise ConfigShapeMismatchError(path=path, expected=OBJECT_LIST, actual=_shape(value))
        if value and not _is_object_list(value):
            raise ConfigShapeMismatchError(path=path, expected=OBJECT_LIST, actual=STRING_LIST)
        return [self._wrap(element) for element in value]

    def keys(self) -> set[str]:
        result: set[str] = set()
        _collect_keys(self._data, "", result)
        return result

    def to_map(self) -> dict[str, Any]:
        return copy.deepcopy(self._data)

    def __repr__(self) -> str:
        return f"TreeConfig({self._data!r})"


def _collect_keys(data: dict[str, Any], prefix: str, out: set[str]) -> None:
    for segment, value in data.items():
        path = join_path(prefix, segment)
        if isinstance(value, dict):
            _collect_keys(value, path, out)
        elif _is_object_list(value):
            for index, element in enumerate(value):
                _collect_keys(element, join_path(path, str(index)), out)
        else:
            out.add(path)
