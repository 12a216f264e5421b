"""Pydantic models for draft payloads crossing the JSON boundary."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, JsonValue, TypeAdapter, ValidationError

if TYPE_CHECKING:
    from draftmerge.domain.draft import Draft, DraftMergeResult

_DRAFT_ADAPTER: TypeAdapter[JsonValue] = TypeAdapter(JsonValue)
_LOCKS_ADAPTER: TypeAdapter[dict[str, bool] | list[str]] = TypeAdapter(
    dict[str, bool] | list[str]
)


class DraftPayloadError(ValueError):
    """Raised when a draft or lock payload is not valid JSON of the right shape."""


def parse_draft_json(payload: str | bytes) -> Draft:
    """Parse a JSON document into a draft value."""

    try:
        return _DRAFT_ADAPTER.validate_json(payload)
    except ValidationError as exc:
        raise DraftPayloadError(f"Invalid draft payload: {exc.errors()[0]['msg']}") from exc


def parse_locks_json(payload: str | bytes) -> dict[str, bool] | list[str]:
    """Parse a lock payload: an object of path to flag or an array of paths."""

    try:
        return _LOCKS_ADAPTER.validate_json(payload)
    except ValidationError as exc:
        raise DraftPayloadError(f"Invalid lock payload: {exc.errors()[0]['msg']}") from exc


class DraftMergeBaseModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class FieldMetadataPayload(DraftMergeBaseModel):
    source: str
    updated_at: datetime


class MergeReport(DraftMergeBaseModel):
    """Serialisable summary of one merge, with path sets in sorted order."""

    draft: JsonValue
    touched_paths: list[str]
    updated_paths: list[str]
    touched_pointers: list[str]
    updated_pointers: list[str]
    metadata_by_pointer: dict[str, FieldMetadataPayload]
    updated_at: datetime

    @classmethod
    def from_result(cls, result: DraftMergeResult) -> MergeReport:
        return cls(
            draft=result.draft,
            touched_paths=sorted(result.touched_paths),
            updated_paths=sorted(result.updated_paths),
            touched_pointers=sorted(result.touched_pointers),
            updated_pointers=sorted(result.updated_pointers),
            metadata_by_pointer={
                pointer: FieldMetadataPayload(source=entry.source, updated_at=entry.updated_at)
                for pointer, entry in sorted(result.metadata_by_pointer.items())
            },
            updated_at=result.updated_at,
        )


__all__ = [
    "DraftPayloadError",
    "FieldMetadataPayload",
    "MergeReport",
    "parse_draft_json",
    "parse_locks_json",
]
