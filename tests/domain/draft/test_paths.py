from __future__ import annotations

import pytest

from draftmerge.domain.draft.paths import (
    expand_paths_with_ancestors,
    normalize_pointers,
    path_to_pointer,
    path_to_segments,
    pointer_ancestors,
    pointer_to_path,
    pointer_to_segments,
    segments_to_pointer,
)


@pytest.mark.parametrize(
    ("path", "pointer"),
    [
        ("milestones.2.owner", "/milestones/2/owner"),
        (" scope . goals ", "/scope/goals"),
        ("scope..goals", "/scope/goals"),
        ("/already/a/pointer", "/already/a/pointer"),
        (("risks", 0, "severity"), "/risks/0/severity"),
        ("", ""),
        ("/", ""),
    ],
)
def test_path_to_pointer(path: str | tuple[object, ...], pointer: str) -> None:
    assert path_to_pointer(path) == pointer


def test_pointer_segments_round_trip_escaped_characters() -> None:
    segments = ("in/out", "a~b", "plain")

    pointer = segments_to_pointer(segments)

    assert pointer == "/in~1out/a~0b/plain"
    assert pointer_to_segments(pointer) == segments


def test_pointer_to_path_joins_unescaped_segments() -> None:
    assert pointer_to_path("/stakeholders/owner") == "stakeholders.owner"
    assert pointer_to_path("/a.b") == "a.b"
    assert pointer_to_path("") == ""


def test_path_to_segments_keeps_dotted_keys_from_pointers() -> None:
    assert path_to_segments("/a.b/c") == ("a.b", "c")
    assert path_to_segments("a.b.c") == ("a", "b", "c")


def test_pointer_ancestors_includes_pointer_itself() -> None:
    assert pointer_ancestors("/risks/0/severity") == {"/risks", "/risks/0", "/risks/0/severity"}
    assert pointer_ancestors("") == frozenset()


def test_normalize_pointers_skips_non_strings_and_root() -> None:
    assert normalize_pointers(["title", 3, "", "/scope/in", None]) == ["/title", "/scope/in"]
    assert normalize_pointers("sections.intro") == ["/sections/intro"]
    assert normalize_pointers(None) == []


def test_expand_paths_with_ancestors() -> None:
    expanded = expand_paths_with_ancestors(["risks.0.severity", "title", ""])

    assert expanded == {"risks", "risks.0", "risks.0.severity", "title"}
