"""Lock-aware draft reconciliation.

``merge_into_draft_with_locks`` folds a partial update into the current draft
without touching locked locations and reports which paths it wrote.
``DraftStore`` keeps one session's authoritative draft and lock set and runs
every update through the reconciler.
"""

from __future__ import annotations

from .locks import LockInput, LockSet
from .paths import (
    expand_paths_with_ancestors,
    path_to_pointer,
    pointer_to_path,
)
from .reconciler import (
    DEFAULT_SOURCE,
    CyclicDraftError,
    DraftMergeResult,
    FieldMetadata,
    merge_extracted_draft,
    merge_into_draft_with_locks,
)
from .store import MANUAL_SOURCE, DraftPathError, DraftSnapshot, DraftStore
from .tree import MISSING, Draft, MaybeDraft, Scalar

__all__ = [
    "DEFAULT_SOURCE",
    "MANUAL_SOURCE",
    "MISSING",
    "CyclicDraftError",
    "Draft",
    "DraftMergeResult",
    "DraftPathError",
    "DraftSnapshot",
    "DraftStore",
    "FieldMetadata",
    "LockInput",
    "LockSet",
    "MaybeDraft",
    "Scalar",
    "expand_paths_with_ancestors",
    "merge_extracted_draft",
    "merge_into_draft_with_locks",
    "path_to_pointer",
    "pointer_to_path",
]
