"""Dotted path helpers shared by the configuration backends."""

from __future__ import annotations

__all__ = ["SEPARATOR", "split_path", "join_path", "is_index"]

SEPARATOR = "."


def split_path(path: str) -> list[str] | None:
    """Split a dotted path into its segments.

    Returns None when the path cannot address anything: an empty path, or
    one with an empty segment such as ``"a..b"`` or ``"a."``.
    """
    if not path:
        return None
    segments = path.split(SEPARATOR)
    if any(not segment for segment in segments):
        return None
    return segments


def join_path(*parts: str) -> str:
    """Join path fragments, skipping empty ones (the root prefix is ``""``)."""
    return SEPARATOR.join(part for part in parts if part)


def is_index(segment: str) -> bool:
    """Whether a segment addresses a list element (``"0"``, ``"12"``)."""
    return segment.isascii() and segment.isdigit()
