"""Addressing helpers for locations inside a draft.

Three spellings name the same location:

- segments: ``("milestones", "2", "owner")``, used internally
- dot paths: ``"milestones.2.owner"``, what form fields and the UI use
- JSON pointers (RFC 6901): ``"/milestones/2/owner"``

Dot paths cannot express a key that itself contains a dot, so lock lookups and
change tracking are keyed by pointer and dot paths are derived views.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Final, TypeAlias

ROOT_POINTER: Final[str] = ""

Segments: TypeAlias = tuple[str, ...]


def escape_segment(segment: object) -> str:
    if segment is None:
        return ""
    return str(segment).replace("~", "~0").replace("/", "~1")


def unescape_segment(segment: str) -> str:
    return segment.replace("~1", "/").replace("~0", "~")


def pointer_to_segments(pointer: str) -> Segments:
    trimmed = pointer.removeprefix("/")
    if not trimmed:
        return ()
    return tuple(unescape_segment(segment) for segment in trimmed.split("/"))


def segments_to_pointer(segments: Sequence[object]) -> str:
    if not segments:
        return ROOT_POINTER
    return "/" + "/".join(escape_segment(segment) for segment in segments)


def join_path(segments: Sequence[object]) -> str:
    return ".".join(str(segment) for segment in segments)


def path_to_segments(path: str | Sequence[object]) -> Segments:
    """Split a dot path, pointer or segment sequence into segments.

    Dot-path segments are stripped and empty segments are dropped, so
    ``" scope . goals "`` and ``"scope..goals"`` both address ``scope.goals``.
    """

    if isinstance(path, str):
        if path.startswith("/"):
            return pointer_to_segments(path)
        return tuple(segment.strip() for segment in path.split(".") if segment.strip())
    return tuple(str(segment) for segment in path)


def path_to_pointer(path: str | Sequence[object]) -> str:
    return segments_to_pointer(path_to_segments(path))


def pointer_to_path(pointer: str) -> str:
    return join_path(pointer_to_segments(pointer))


def ancestor_segments(segments: Segments) -> Iterable[Segments]:
    """Yield every non-empty prefix of ``segments``, shortest first."""

    for index in range(1, len(segments) + 1):
        yield segments[:index]


def pointer_ancestors(pointer: str) -> frozenset[str]:
    return frozenset(
        segments_to_pointer(prefix) for prefix in ancestor_segments(pointer_to_segments(pointer))
    )


def normalize_pointers(paths: str | Iterable[object] | None) -> list[str]:
    """Convert one path or a collection of paths into pointers.

    Non-string entries and entries that resolve to the root are skipped.
    """

    if paths is None:
        return []
    if isinstance(paths, str):
        paths = (paths,)
    pointers: list[str] = []
    for entry in paths:
        if not isinstance(entry, str):
            continue
        pointer = path_to_pointer(entry)
        if pointer:
            pointers.append(pointer)
    return pointers


def expand_paths_with_ancestors(paths: Iterable[str]) -> frozenset[str]:
    """Return every non-empty dot prefix of every path in ``paths``.

    ``{"risks.0.severity"}`` expands to ``{"risks", "risks.0", "risks.0.severity"}``.
    """

    expanded: set[str] = set()
    for path in paths:
        if not path:
            continue
        segments = tuple(segment for segment in path.split(".") if segment)
        expanded.update(join_path(prefix) for prefix in ancestor_segments(segments))
    return frozenset(expanded)


__all__ = [
    "ROOT_POINTER",
    "Segments",
    "ancestor_segments",
    "escape_segment",
    "expand_paths_with_ancestors",
    "join_path",
    "normalize_pointers",
    "path_to_pointer",
    "path_to_segments",
    "pointer_ancestors",
    "pointer_to_path",
    "pointer_to_segments",
    "segments_to_pointer",
    "unescape_segment",
]
