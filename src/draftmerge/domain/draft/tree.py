"""Value model for in-progress document drafts.

A draft is JSON-shaped: lists, string-keyed mappings and scalars. Python has no
``undefined``, so absent values are represented by the ``MISSING`` sentinel,
which is distinct from ``None`` (JSON ``null``).
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Final, TypeAlias, TypeGuard


class _Missing(Enum):
    MISSING = "MISSING"

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Final = _Missing.MISSING

Scalar: TypeAlias = str | int | float | bool | None
Draft: TypeAlias = "list[Draft] | Mapping[str, Draft] | Scalar"
MaybeDraft: TypeAlias = "Draft | _Missing"


def is_container(value: object) -> TypeGuard[list[Draft] | Mapping[str, Draft]]:
    """Return whether ``value`` is a list or a mapping."""

    return isinstance(value, list | Mapping)


def is_absent(value: object) -> bool:
    return value is None or value is MISSING


__all__ = ["MISSING", "Draft", "MaybeDraft", "Scalar", "is_absent", "is_container"]
