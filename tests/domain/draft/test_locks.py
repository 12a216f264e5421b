from __future__ import annotations

import pytest

from draftmerge.domain.draft import LockSet


@pytest.mark.parametrize(
    "locks",
    [
        {"sections.summary": True},
        {"/sections/summary": True},
        ["sections.summary"],
        {"sections.summary"},
        frozenset({"/sections/summary"}),
        ("sections.summary",),
        "sections.summary",
    ],
)
def test_from_input_accepts_common_shapes(locks: object) -> None:
    lock_set = LockSet.from_input(locks)  # type: ignore[arg-type]

    assert lock_set.pointers == {"/sections/summary"}


def test_from_input_uses_truthiness_of_mapping_values() -> None:
    lock_set = LockSet.from_input({"a": True, "b": False, "c": None, "d": 1, "e": ""})

    assert lock_set.pointers == {"/a", "/d"}


def test_from_input_ignores_non_strings_and_root() -> None:
    lock_set = LockSet.from_input(["", "/", 7, None, "title"])  # type: ignore[list-item]

    assert lock_set.pointers == {"/title"}


def test_from_input_returns_existing_lock_set() -> None:
    lock_set = LockSet.from_input(["title"])

    assert LockSet.from_input(lock_set) is lock_set
    assert not LockSet.from_input(None)


def test_descendants_of_locked_paths_are_locked() -> None:
    lock_set = LockSet.from_input(["budget"])

    assert lock_set.is_locked(("budget",))
    assert lock_set.is_locked(("budget", "lines", "0"))
    assert not lock_set.is_locked(("budgets",))
    assert not lock_set.is_locked(())
    assert lock_set.is_pointer_locked("/budget/total")


def test_with_pointers_adds_locks_without_mutating() -> None:
    lock_set = LockSet.from_input(["title"])

    extended = lock_set.with_pointers(["/scope", ""])

    assert extended.pointers == {"/title", "/scope"}
    assert lock_set.pointers == {"/title"}
    assert lock_set.with_pointers(["/title"]) is lock_set
    assert len(extended) == 2


def test_from_input_ignores_unsupported_shapes() -> None:
    assert not LockSet.from_input(42)  # type: ignore[arg-type]
