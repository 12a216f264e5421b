"""In-memory store for one draft editing session.

The store owns the authoritative draft and its lock set, serialises merges so
concurrent updates cannot overwrite each other, and keeps the bookkeeping a UI
needs: which pointers were recently written (highlights), who wrote them
(metadata) and whether a background sync is in flight.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime
from logging import getLogger
from types import MappingProxyType
from typing import TYPE_CHECKING, Final, TypeAlias

from draftmerge.domain.time import as_utc, utcnow

from .locks import LockSet
from .paths import normalize_pointers, path_to_segments, segments_to_pointer
from .reconciler import DEFAULT_SOURCE, FieldMetadata, merge_into_draft_with_locks
from .tree import MISSING

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from draftmerge.domain.time import Clock

    from .paths import Segments
    from .reconciler import DraftMergeResult
    from .tree import Draft, MaybeDraft

MANUAL_SOURCE: Final[str] = "manual"

log = getLogger(__name__)

Listener: TypeAlias = "Callable[[], None]"


class DraftPathError(KeyError):
    """Raised when a path cannot be addressed in the current draft."""


@dataclass(frozen=True, slots=True)
class DraftSnapshot:
    """Read-only view of the store state at one point in time."""

    draft: Draft = None
    locks: LockSet = field(default_factory=LockSet)
    highlighted_pointers: frozenset[str] = frozenset()
    metadata_by_pointer: Mapping[str, FieldMetadata] = field(
        default_factory=lambda: MappingProxyType({})
    )
    pending_sync_count: int = 0
    last_sync_at: datetime | None = None

    @property
    def is_syncing(self) -> bool:
        return self.pending_sync_count > 0


class DraftStore:
    """Serialised owner of a draft, its locks and change highlights."""

    def __init__(self, draft: Draft = None, *, clock: Clock = utcnow) -> None:
        self._clock = clock
        self._mutex = threading.RLock()
        self._state = DraftSnapshot(draft=draft)
        self._listeners: list[Listener] = []

    def snapshot(self) -> DraftSnapshot:
        return self._state

    @property
    def draft(self) -> Draft:
        return self._state.draft

    @property
    def locks(self) -> LockSet:
        return self._state.locks

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` and return a callable that removes it."""

        with self._mutex:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._mutex:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def apply_update(
        self,
        incoming: MaybeDraft,
        *,
        source: str = DEFAULT_SOURCE,
        updated_at: datetime | None = None,
    ) -> DraftMergeResult:
        """Merge ``incoming`` into the draft honouring the current locks."""

        with self._mutex:
            state = self._state
            result = merge_into_draft_with_locks(
                state.draft,
                incoming,
                state.locks,
                source=source,
                updated_at=updated_at,
                clock=self._clock,
            )
            changes: dict[str, object] = {"draft": result.draft}
            if result.metadata_by_pointer:
                changes["metadata_by_pointer"] = MappingProxyType(
                    {**state.metadata_by_pointer, **result.metadata_by_pointer}
                )
                changes["highlighted_pointers"] = (
                    state.highlighted_pointers | result.touched_pointers
                )
                changes["last_sync_at"] = result.updated_at
            self._apply(**changes)

        log.info(
            "Applied %s update: touched=%s, locked=%s",
            source,
            len(result.touched_pointers),
            len(state.locks),
        )
        return result

    def apply_manual_edit(
        self,
        path: str | Sequence[object],
        value: Draft,
        *,
        updated_at: datetime | None = None,
    ) -> str:
        """Write ``value`` at ``path`` and lock it against automated merges.

        Manual edits bypass existing locks. Returns the pointer that was written.
        """

        segments = path_to_segments(path)
        if not segments:
            raise DraftPathError("Manual edits must address a field, not the draft root")
        pointer = segments_to_pointer(segments)
        timestamp = as_utc(updated_at) if updated_at is not None else self._clock()

        with self._mutex:
            state = self._state
            draft = _assign(state.draft if state.draft is not None else {}, segments, value)
            self._apply(
                draft=draft,
                locks=state.locks.with_pointers((pointer,)),
                metadata_by_pointer=MappingProxyType(
                    {
                        **state.metadata_by_pointer,
                        pointer: FieldMetadata(source=MANUAL_SOURCE, updated_at=timestamp),
                    }
                ),
                highlighted_pointers=state.highlighted_pointers | {pointer},
                last_sync_at=timestamp,
            )
        return pointer

    def record_metadata(
        self,
        paths: Mapping[str, FieldMetadata | Mapping[str, object]] | str | Iterable[str],
        *,
        source: str = DEFAULT_SOURCE,
        updated_at: datetime | None = None,
    ) -> None:
        """Record provenance for ``paths`` and highlight them.

        ``paths`` may map pointers to ``FieldMetadata`` (or dicts with
        ``source``/``updated_at``); missing fields fall back to the arguments.
        """

        timestamp = as_utc(updated_at) if updated_at is not None else self._clock()
        entries: dict[str, FieldMetadata] = {}
        if isinstance(paths, Mapping):
            for pointer, value in paths.items():
                for normalized in normalize_pointers(pointer):
                    entries[normalized] = _coerce_metadata(
                        value, source=source, updated_at=timestamp
                    )
        else:
            for pointer in normalize_pointers(paths):
                entries[pointer] = FieldMetadata(source=source, updated_at=timestamp)

        if not entries:
            return

        with self._mutex:
            state = self._state
            self._apply(
                metadata_by_pointer=MappingProxyType({**state.metadata_by_pointer, **entries}),
                highlighted_pointers=state.highlighted_pointers | frozenset(entries),
                last_sync_at=timestamp,
            )

    def clear_highlights(self, paths: str | Iterable[str]) -> None:
        pointers = set(normalize_pointers(paths))
        with self._mutex:
            remaining = self._state.highlighted_pointers - pointers
            if remaining != self._state.highlighted_pointers:
                self._apply(highlighted_pointers=remaining)

    def clear_metadata(self) -> None:
        """Forget metadata, highlights, the last sync time and all locks."""

        with self._mutex:
            self._apply(
                metadata_by_pointer=MappingProxyType({}),
                highlighted_pointers=frozenset(),
                last_sync_at=None,
                locks=LockSet(),
            )

    def lock_paths(self, paths: str | Iterable[str]) -> None:
        with self._mutex:
            locks = self._state.locks.with_pointers(normalize_pointers(paths))
            if locks is not self._state.locks:
                self._apply(locks=locks)

    def reset_locks(self) -> None:
        with self._mutex:
            if self._state.locks:
                self._apply(locks=LockSet())

    def begin_sync(self) -> None:
        with self._mutex:
            self._apply(pending_sync_count=self._state.pending_sync_count + 1)

    def complete_sync(self) -> None:
        with self._mutex:
            self._apply(pending_sync_count=max(0, self._state.pending_sync_count - 1))

    def reset_sync(self) -> None:
        with self._mutex:
            self._apply(pending_sync_count=0)

    def _apply(self, **changes: object) -> None:
        state = self._state
        if all(getattr(state, name) == value for name, value in changes.items()):
            return
        self._state = replace(state, **changes)  # pyright: ignore[reportArgumentType]
        self._emit()

    def _emit(self) -> None:
        for listener in tuple(self._listeners):
            try:
                listener()
            except Exception:
                log.exception("Draft store subscriber failed")


def _coerce_metadata(
    value: FieldMetadata | Mapping[str, object], *, source: str, updated_at: datetime
) -> FieldMetadata:
    if isinstance(value, FieldMetadata):
        return value
    entry_source = value.get("source")
    entry_updated_at = value.get("updated_at")
    return FieldMetadata(
        source=entry_source if isinstance(entry_source, str) and entry_source else source,
        updated_at=as_utc(entry_updated_at)
        if isinstance(entry_updated_at, datetime)
        else updated_at,
    )


def _assign(container: MaybeDraft, segments: Segments, value: Draft) -> Draft:
    head, *rest = segments
    child_value: Draft

    if isinstance(container, list):
        if not head.isdigit():
            raise DraftPathError(f"List index expected at {head!r}")
        index = int(head)
        if index > len(container):
            raise DraftPathError(f"List index {index} is out of range")
        existing = container[index] if index < len(container) else MISSING
        child_value = _assign(existing, tuple(rest), value) if rest else value
        result = list(container)
        if index < len(container):
            result[index] = child_value
        else:
            result.append(child_value)
        return result

    base: Mapping[str, Draft] = container if isinstance(container, Mapping) else {}
    child_value = _assign(base.get(head, MISSING), tuple(rest), value) if rest else value
    return {**base, head: child_value}


__all__ = ["MANUAL_SOURCE", "DraftPathError", "DraftSnapshot", "DraftStore"]
