"""Lock sets: draft locations that automated merges must not overwrite."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import TypeAlias

from .paths import Segments, ancestor_segments, path_to_pointer, pointer_to_segments

LockInput: TypeAlias = "LockSet | Mapping[str, object] | Iterable[str] | None"


@dataclass(frozen=True, slots=True)
class LockSet:
    """Immutable set of locked pointers.

    A location is locked when its own pointer or the pointer of any ancestor is
    in the set. Build instances with :meth:`from_input`, which accepts the
    shapes callers hold locks in.
    """

    locked: frozenset[Segments] = field(default_factory=frozenset[Segments])

    @classmethod
    def from_input(cls, locks: LockInput) -> LockSet:
        """Normalise ``locks`` into a ``LockSet``.

        Mappings lock each key whose value is truthy; other iterables lock each
        entry. Keys starting with ``/`` are JSON pointers, anything else is a
        dot path. Non-string keys and keys addressing the root are ignored.
        """

        if isinstance(locks, LockSet):
            return locks
        if locks is None:
            return cls()

        if isinstance(locks, Mapping):
            entries = (key for key, value in locks.items() if value)
        elif isinstance(locks, str):
            entries = iter((locks,))
        elif isinstance(locks, Iterable):
            entries = iter(locks)
        else:
            return cls()

        locked: set[Segments] = set()
        for entry in entries:
            if not isinstance(entry, str):
                continue
            segments = pointer_to_segments(path_to_pointer(entry))
            if segments:
                locked.add(segments)
        return cls(locked=frozenset(locked))

    @property
    def pointers(self) -> frozenset[str]:
        return frozenset(path_to_pointer(segments) for segments in self.locked)

    def is_locked(self, segments: Segments) -> bool:
        """Return whether ``segments`` or any of its ancestors is locked."""

        if not self.locked or not segments:
            return False
        return any(prefix in self.locked for prefix in ancestor_segments(segments))

    def is_pointer_locked(self, pointer: str) -> bool:
        return self.is_locked(pointer_to_segments(pointer))

    def with_pointers(self, pointers: Iterable[str]) -> LockSet:
        added = {pointer_to_segments(pointer) for pointer in pointers}
        added.discard(())
        if added <= self.locked:
            return self
        return LockSet(locked=self.locked | added)

    def __len__(self) -> int:
        return len(self.locked)

    def __bool__(self) -> bool:
        return bool(self.locked)


__all__ = ["LockInput", "LockSet"]
