"""Config node and config value protocols.

A backend exposes a tree of configuration through two protocols:

- ``ConfigNode``: a position in the tree, navigated with dotted paths.
- ``ConfigValue``: one resolved leaf, readable as a string or a list of strings.

A value may additionally implement ``SerializableConfigValue`` to support
conversion into arbitrary Python types. Callers should not check for it
themselves; ``cfgtree.accessors.get_as`` does the capability check.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

__all__ = ["ConfigNode", "ConfigValue", "SerializableConfigValue"]


@runtime_checkable
class ConfigValue(Protocol):
    """A single configuration leaf value."""

    def get_string(self) -> str:
        """Return the scalar string value.

        Raises:
            ConfigShapeMismatchError: If the value is a list.
        """
        ...

    def get_list(self) -> list[str]:
        """Return the list value as a new list of strings.

        Raises:
            ConfigShapeMismatchError: If the value is a scalar.
        """
        ...


@runtime_checkable
class SerializableConfigValue(ConfigValue, Protocol):
    """A config value that can be converted to an arbitrary type."""

    def get_as(self, target: Any) -> Any:
        """Convert the value to ``target``.

        Args:
            target: A type expression describing the result, e.g. ``int``,
                ``list[int]`` or a pydantic model class.

        Raises:
            ConfigConversionError: If the value does not fit ``target``.
        """
        ...


@runtime_checkable
class ConfigNode(Protocol):
    """A node of the configuration tree.

    Paths are always relative to the node being queried.
    """

    def property(self, path: str) -> ConfigValue:
        """Get the leaf value at ``path`` or fail.

        Raises:
            ConfigPathNotFoundError: If nothing exists at ``path``.
            ConfigShapeMismatchError: If ``path`` is an object or a list of objects.
        """
        ...

    def property_or_none(self, path: str) -> ConfigValue | None:
        """Get the leaf value at ``path``, or None if the path does not exist.

        Raises:
            ConfigShapeMismatchError: If ``path`` exists but is not a leaf.
        """
        ...

    def config(self, path: str) -> ConfigNode:
        """Get the child node at ``path`` or fail.

        Raises:
            ConfigPathNotFoundError: If nothing exists at ``path``.
            ConfigShapeMismatchError: If ``path`` is a leaf or a list.
        """
        ...

    def config_list(self, path: str) -> list[ConfigNode]:
        """Get the child nodes of the array of objects at ``path`` or fail.

        Raises:
            ConfigPathNotFoundError: If nothing exists at ``path``.
            ConfigShapeMismatchError: If ``path`` is not an array of objects.
        """
        ...

    def keys(self) -> set[str]:
        """Return the dotted paths of every leaf below this node.

        Object paths are never included; leaves nested in arrays of objects
        are reported with their element index (``"servers.0.host"``).
        """
        ...

    def to_map(self) -> dict[str, Any]:
        """Return a deep copy of this subtree as plain dicts, lists and strings."""
        ...
