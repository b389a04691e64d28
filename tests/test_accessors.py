"""Tests for the typed accessors and absence-tolerant readers."""

from __future__ import annotations

from typing import Any

import pytest
from pydantic import BaseModel

from cfgtree import MapConfig, TreeConfig
from cfgtree.accessors import (
    get_as,
    property_as,
    property_as_or_none,
    try_get_string,
    try_get_string_list,
)
from cfgtree.errors import (
    ConfigConversionError,
    ConfigPathNotFoundError,
    ConfigShapeMismatchError,
    ConfigurationError,
    UnsupportedConversionError,
)


class StringOnlyValue:
    """The smallest possible ConfigValue: string and list reads only."""

    def __init__(self, value: str) -> None:
        self._value = value

    def get_string(self) -> str:
        return self._value

    def get_list(self) -> list[str]:
        return [self._value]


class RecordingValue:
    """A serializable value that records conversion requests."""

    def __init__(self, value: str) -> None:
        self._value = value
        self.get_as_calls: list[Any] = []

    def get_string(self) -> str:
        return self._value

    def get_list(self) -> list[str]:
        return [self._value]

    def get_as(self, target: Any) -> Any:
        self.get_as_calls.append(target)
        return target(self._value)


class Server(BaseModel):
    host: str
    port: int


# === get_as ===


class TestGetAs:
    def test_str_uses_get_string(self) -> None:
        """The str fast path never reaches the conversion capability."""
        value = RecordingValue("42")
        assert get_as(value, str) == "42"
        assert value.get_as_calls == []

    def test_non_str_delegates_to_get_as(self) -> None:
        value = RecordingValue("42")
        assert get_as(value, int) == 42
        assert value.get_as_calls == [int]

    def test_str_works_without_capability(self) -> None:
        assert get_as(StringOnlyValue("x"), str) == "x"

    @pytest.mark.parametrize("target", [int, float, bool, list[str], Server])
    def test_non_str_without_capability_raises(self, target: Any) -> None:
        """Never a silent None or default."""
        with pytest.raises(UnsupportedConversionError, match="does not support deserialization"):
            get_as(StringOnlyValue("1"), target)

    def test_unsupported_is_not_configuration_error(self) -> None:
        with pytest.raises(UnsupportedConversionError) as exc_info:
            get_as(StringOnlyValue("1"), int)
        assert not isinstance(exc_info.value, ConfigurationError)

    def test_str_on_list_value_raises_shape_mismatch(self, tree_config: TreeConfig) -> None:
        with pytest.raises(ConfigShapeMismatchError):
            get_as(tree_config.property("db.ports"), str)


# === property_as / property_as_or_none ===


class TestPropertyAs:
    def test_tree_backend_int(self, tree_config: TreeConfig) -> None:
        assert property_as(tree_config, "app.workers", int) == 4

    def test_tree_backend_list(self, tree_config: TreeConfig) -> None:
        assert property_as(tree_config, "db.ports", list[int]) == [5432, 5433]

    def test_tree_backend_str(self, tree_config: TreeConfig) -> None:
        assert property_as(tree_config, "db.host", str) == "localhost"

    def test_map_backend_str(self, map_config: MapConfig) -> None:
        assert property_as(map_config, "db.host", str) == "localhost"

    def test_map_backend_non_str_raises(self, map_config: MapConfig) -> None:
        with pytest.raises(UnsupportedConversionError):
            property_as(map_config, "app.workers", int)

    def test_missing_raises(self, config: Any) -> None:
        with pytest.raises(ConfigPathNotFoundError):
            property_as(config, "db.missing", str)

    def test_conversion_failure(self, tree_config: TreeConfig) -> None:
        with pytest.raises(ConfigConversionError):
            property_as(tree_config, "db.host", int)

    def test_json_record(self) -> None:
        config = TreeConfig({"primary": '{"host": "db1", "port": 5432}'})
        assert property_as(config, "primary", Server) == Server(host="db1", port=5432)


class TestPropertyAsOrNone:
    def test_present(self, tree_config: TreeConfig) -> None:
        assert property_as_or_none(tree_config, "app.workers", int) == 4

    def test_missing_returns_none(self, config: Any) -> None:
        assert property_as_or_none(config, "app.missing", int) is None

    def test_missing_on_map_backend_skips_conversion(self, map_config: MapConfig) -> None:
        """Absence short-circuits before the capability check."""
        assert property_as_or_none(map_config, "app.missing", int) is None

    def test_present_on_map_backend_raises(self, map_config: MapConfig) -> None:
        with pytest.raises(UnsupportedConversionError):
            property_as_or_none(map_config, "app.workers", int)

    def test_object_raises(self, config: Any) -> None:
        with pytest.raises(ConfigShapeMismatchError):
            property_as_or_none(config, "db", str)


# === try_get_string / try_get_string_list ===


class TestTryGetString:
    def test_present(self, config: Any) -> None:
        assert try_get_string(config, "db.host") == "localhost"

    def test_missing(self, config: Any) -> None:
        assert try_get_string(config, "db.user") is None

    def test_list_raises(self, config: Any) -> None:
        with pytest.raises(ConfigShapeMismatchError):
            try_get_string(config, "db.ports")

    def test_object_raises(self, config: Any) -> None:
        with pytest.raises(ConfigShapeMismatchError):
            try_get_string(config, "db")


class TestTryGetStringList:
    def test_present(self, config: Any) -> None:
        assert try_get_string_list(config, "db.ports") == ["5432", "5433"]

    def test_missing(self, config: Any) -> None:
        assert try_get_string_list(config, "db.replicas") is None

    def test_scalar_raises(self, config: Any) -> None:
        with pytest.raises(ConfigShapeMismatchError):
            try_get_string_list(config, "db.host")

    def test_array_of_objects_raises(self, config: Any) -> None:
        with pytest.raises(ConfigShapeMismatchError):
            try_get_string_list(config, "servers")
