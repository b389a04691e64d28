"""cfgtree - Read-only, path-addressed access to hierarchical configuration."""

from __future__ import annotations

# Protocols
from cfgtree.interfaces import ConfigNode, ConfigValue, SerializableConfigValue

# Backends
from cfgtree.flat import MapConfig, MapConfigValue
from cfgtree.tree import TreeConfig, TreeConfigValue

# Typed accessors
from cfgtree.accessors import (
    get_as,
    property_as,
    property_as_or_none,
    try_get_string,
    try_get_string_list,
)

# Errors
from cfgtree.errors import (
    CfgTreeError,
    ConfigConversionError,
    ConfigPathNotFoundError,
    ConfigShapeMismatchError,
    ConfigurationError,
    ErrorCodes,
    UnsupportedConversionError,
)

__version__ = "0.1.0"

__all__ = [
    # Protocols
    "ConfigNode",
    "ConfigValue",
    "SerializableConfigValue",
    # Backends
    "TreeConfig",
    "TreeConfigValue",
    "MapConfig",
    "MapConfigValue",
    # Typed accessors
    "get_as",
    "property_as",
    "property_as_or_none",
    "try_get_string",
    "try_get_string_list",
    # Errors
    "ErrorCodes",
    "CfgTreeError",
    "ConfigurationError",
    "ConfigPathNotFoundError",
    "ConfigShapeMismatchError",
    "ConfigConversionError",
    "UnsupportedConversionError",
]
