"""Lock-aware reconciliation of incoming draft updates.

Extraction, voice transcription and form merges all produce partial drafts
shaped like the authoritative one. :func:`merge_into_draft_with_locks` folds such
an update into the current draft:

- mappings are merged as a key union; keys absent from the update survive
- lists are merged index by index; trailing items the update no longer has are
  removed unless locked
- scalars (``None`` included) replace the current value
- ``MISSING`` leaves the current value alone
- locked locations and everything below them are never written

The function is pure. Each modified container level is a fresh copy and
untouched subtrees are shared with the current draft.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field
from logging import getLogger
from types import MappingProxyType
from typing import TYPE_CHECKING, Final

from draftmerge.domain.time import as_utc, utcnow

from .locks import LockSet
from .paths import pointer_ancestors, pointer_to_path, segments_to_pointer
from .tree import MISSING, is_absent, is_container

if TYPE_CHECKING:
    from datetime import datetime

    from draftmerge.domain.time import Clock

    from .locks import LockInput
    from .paths import Segments
    from .tree import Draft, MaybeDraft

DEFAULT_SOURCE: Final[str] = "AI"

log = getLogger(__name__)


class CyclicDraftError(ValueError):
    """Raised when an incoming draft contains itself."""


@dataclass(frozen=True, slots=True)
class FieldMetadata:
    """Provenance recorded for one written location."""

    source: str
    updated_at: datetime


@dataclass(frozen=True, slots=True)
class DraftMergeResult:
    """Merged draft plus the locations the merge wrote.

    ``touched_*`` hold the exact written locations; ``updated_*`` add every
    ancestor so a UI can flag whole sections.
    """

    draft: Draft
    updated_at: datetime
    touched_paths: frozenset[str] = frozenset()
    touched_pointers: frozenset[str] = frozenset()
    updated_paths: frozenset[str] = frozenset()
    updated_pointers: frozenset[str] = frozenset()
    metadata_by_pointer: Mapping[str, FieldMetadata] = field(
        default_factory=lambda: MappingProxyType({})
    )


@dataclass(slots=True)
class _MergeRun:
    locks: LockSet
    touched: set[Segments] = field(default_factory=set["Segments"])
    active: set[int] = field(default_factory=set[int])

    def merge(self, current: MaybeDraft, incoming: MaybeDraft, segments: Segments) -> MaybeDraft:
        if self.locks.is_locked(segments):
            return current

        match incoming:
            case list():
                with self._visiting(incoming):
                    result = self._merge_list(current, incoming, segments)
            case Mapping():
                with self._visiting(incoming):
                    result = self._merge_mapping(current, incoming, segments)
            case _ if incoming is MISSING:
                return current
            case _:
                self._touch(segments)
                return incoming

        self._touch(segments)
        return result

    def _merge_list(
        self, current: MaybeDraft, incoming: list[Draft], segments: Segments
    ) -> list[Draft]:
        base: list[Draft] = current if isinstance(current, list) else []
        result = list(base)

        for index, value in enumerate(incoming):
            existing = base[index] if index < len(base) else MISSING
            merged = self.merge(existing, value, (*segments, str(index)))
            if merged is MISSING:
                merged = None
            if index < len(result):
                result[index] = merged
            else:
                result.append(merged)

        for index in range(len(result) - 1, len(incoming) - 1, -1):
            child = (*segments, str(index))
            if self.locks.is_locked(child):
                continue
            del result[index]
            self._touch(child)

        return result

    def _merge_mapping(
        self, current: MaybeDraft, incoming: Mapping[str, Draft], segments: Segments
    ) -> dict[str, Draft]:
        base: Mapping[str, Draft] = current if isinstance(current, Mapping) else {}
        result = dict(base)

        for key, value in incoming.items():
            merged = self.merge(base.get(key, MISSING), value, (*segments, key))
            if merged is not MISSING:
                result[key] = merged

        return result

    def _touch(self, segments: Segments) -> None:
        if segments:
            self.touched.add(segments)

    @contextmanager
    def _visiting(self, container: object) -> Iterator[None]:
        key = id(container)
        if key in self.active:
            raise CyclicDraftError("Incoming draft contains a reference cycle")
        self.active.add(key)
        try:
            yield
        finally:
            self.active.discard(key)


def merge_into_draft_with_locks(
    current: MaybeDraft,
    incoming: MaybeDraft,
    locks: LockInput = None,
    *,
    source: str = DEFAULT_SOURCE,
    updated_at: datetime | None = None,
    clock: Clock = utcnow,
) -> DraftMergeResult:
    """Merge ``incoming`` into ``current`` without writing locked locations.

    ``locks`` may be a :class:`LockSet`, a mapping of dot path or pointer to a
    flag, or an iterable of paths. A bare scalar ``incoming`` is a no-op and a
    scalar ``current`` is treated as an empty mapping.
    """

    timestamp = as_utc(updated_at) if updated_at is not None else clock()

    if not is_container(incoming):
        draft = incoming if is_absent(current) else current
        return DraftMergeResult(draft=None if draft is MISSING else draft, updated_at=timestamp)

    base: Draft = current if is_container(current) else {}
    lock_set = LockSet.from_input(locks)
    run = _MergeRun(locks=lock_set)
    merged = run.merge(base, incoming, ())

    touched_pointers = frozenset(
        segments_to_pointer(segments)
        for segments in run.touched
        if not lock_set.is_locked(segments)
    )
    updated_pointers = frozenset(
        ancestor for pointer in touched_pointers for ancestor in pointer_ancestors(pointer)
    )
    metadata = FieldMetadata(source=source, updated_at=timestamp)

    result = DraftMergeResult(
        draft=merged,
        updated_at=timestamp,
        touched_paths=frozenset(map(pointer_to_path, touched_pointers)),
        touched_pointers=touched_pointers,
        updated_paths=frozenset(map(pointer_to_path, updated_pointers)),
        updated_pointers=updated_pointers,
        metadata_by_pointer=MappingProxyType(dict.fromkeys(touched_pointers, metadata)),
    )
    log.debug(
        "Merged %s update: touched=%s, updated=%s, locks=%s",
        source,
        len(result.touched_pointers),
        len(result.updated_pointers),
        len(lock_set),
    )
    return result


def merge_extracted_draft(
    current: MaybeDraft, incoming: MaybeDraft, locks: LockInput = None
) -> Draft:
    """Merge and return only the resulting draft."""

    return merge_into_draft_with_locks(current, incoming, locks).draft


__all__ = [
    "DEFAULT_SOURCE",
    "CyclicDraftError",
    "DraftMergeResult",
    "FieldMetadata",
    "merge_extracted_draft",
    "merge_into_draft_with_locks",
]
