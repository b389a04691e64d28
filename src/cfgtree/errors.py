"""Error hierarchy for cfgtree."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

__all__ = [
    "CfgTreeError",
    "ConfigurationError",
    "ConfigPathNotFoundError",
    "ConfigShapeMismatchError",
    "ConfigConversionError",
    "UnsupportedConversionError",
    "ErrorCodes",
]


class CfgTreeError(Exception):
    """Base error for all cfgtree errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details: dict[str, Any] = details or {}
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc).isoformat()

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class ConfigurationError(CfgTreeError):
    """Raised when configuration is missing or does not have the requested shape."""

    def __init__(self, message: str, cause: Exception | None = None, **kwargs: Any) -> None:
        kwargs.setdefault("code", "CONFIG_INVALID")
        super().__init__(message=message, cause=cause, **kwargs)


class ConfigPathNotFoundError(ConfigurationError):
    """Raised when a required path does not exist in the configuration tree."""

    def __init__(self, path: str, **kwargs: Any) -> None:
        super().__init__(
            code="CONFIG_PATH_NOT_FOUND",
            message=f"Property {path} not found.",
            details={"path": path},
            **kwargs,
        )

    @property
    def path(self) -> str:
        """The dotted path that could not be resolved."""
        return self.details["path"]


class ConfigShapeMismatchError(ConfigurationError):
    """Raised when a path resolves, but to a leaf where a node was expected or vice versa."""

    def __init__(self, path: str, expected: str, actual: str, **kwargs: Any) -> None:
        super().__init__(
            code="CONFIG_SHAPE_MISMATCH",
            message=f"Property {path} is {actual}, expected {expected}.",
            details={"path": path, "expected": expected, "actual": actual},
            **kwargs,
        )

    @property
    def path(self) -> str:
        """The dotted path with the unexpected shape."""
        return self.details["path"]

    @property
    def expected(self) -> str:
        """Shape the caller asked for."""
        return self.details["expected"]

    @property
    def actual(self) -> str:
        """Shape found in the tree."""
        return self.details["actual"]


class ConfigConversionError(ConfigurationError):
    """Raised when a leaf value cannot be converted to the requested type."""

    def __init__(self, path: str, target: Any, **kwargs: Any) -> None:
        target_name = getattr(target, "__name__", None) or repr(target)
        super().__init__(
            code="CONFIG_CONVERSION_FAILED",
            message=f"Property {path} cannot be converted to {target_name}.",
            details={"path": path, "target": target_name},
            **kwargs,
        )


class UnsupportedConversionError(CfgTreeError, NotImplementedError):
    """Raised when a typed read is requested from a backend without deserialization support.

    This is a capability error, not a data error, so it is not a ConfigurationError.
    """

    def __init__(self, message: str | None = None, **kwargs: Any) -> None:
        super().__init__(
            code="CONVERSION_UNSUPPORTED",
            message=message or "Configuration implementation does not support deserialization",
            **kwargs,
        )


class ErrorCodes:
    """All cfgtree error codes as constants.

    Example:
        if error.code == ErrorCodes.CONFIG_PATH_NOT_FOUND:
            use_default()
    """

    CONFIG_INVALID = "CONFIG_INVALID"
    CONFIG_PATH_NOT_FOUND = "CONFIG_PATH_NOT_FOUND"
    CONFIG_SHAPE_MISMATCH = "CONFIG_SHAPE_MISMATCH"
    CONFIG_CONVERSION_FAILED = "CONFIG_CONVERSION_FAILED"
    CONVERSION_UNSUPPORTED = "CONVERSION_UNSUPPORTED"

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("ErrorCodes is immutable")
