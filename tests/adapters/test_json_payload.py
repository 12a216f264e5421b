from __future__ import annotations

import json
from datetime import datetime

import pytest

from draftmerge.adapters.json_payload import (
    DraftPayloadError,
    MergeReport,
    parse_draft_json,
    parse_locks_json,
)
from draftmerge.domain.draft import merge_into_draft_with_locks


def test_parse_draft_json_returns_plain_values() -> None:
    draft = parse_draft_json('{"title": "Charter", "risks": [{"severity": null}], "budget": 1.5}')

    assert draft == {"title": "Charter", "risks": [{"severity": None}], "budget": 1.5}


def test_parse_draft_json_accepts_bytes_and_scalars() -> None:
    assert parse_draft_json(b'["a", 1, true]') == ["a", 1, True]
    assert parse_draft_json('"just text"') == "just text"


def test_parse_draft_json_rejects_invalid_json() -> None:
    with pytest.raises(DraftPayloadError, match="Invalid draft payload"):
        parse_draft_json("{not json")


def test_parse_locks_json_accepts_objects_and_arrays() -> None:
    assert parse_locks_json('{"title": true, "scope.in": false}') == {
        "title": True,
        "scope.in": False,
    }
    assert parse_locks_json('["title", "/team/0"]') == ["title", "/team/0"]


def test_parse_locks_json_rejects_other_shapes() -> None:
    with pytest.raises(DraftPayloadError, match="Invalid lock payload"):
        parse_locks_json("42")


def test_merge_report_sorts_paths_and_serialises(fixed_now: datetime) -> None:
    result = merge_into_draft_with_locks(
        {"title": "Old", "team": []},
        {"title": "New", "team": [{"name": "Ana"}]},
        {"title": True},
        source="voice",
        updated_at=fixed_now,
    )

    report = MergeReport.from_result(result)
    payload = json.loads(report.model_dump_json())

    assert report.touched_paths == ["team", "team.0", "team.0.name"]
    assert report.updated_pointers == ["/team", "/team/0", "/team/0/name"]
    assert payload["draft"] == {"title": "Old", "team": [{"name": "Ana"}]}
    assert payload["metadata_by_pointer"]["/team/0/name"]["source"] == "voice"
    assert datetime.fromisoformat(payload["updated_at"]) == fixed_now
