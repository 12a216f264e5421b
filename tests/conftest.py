from __future__ import annotations

from datetime import UTC, datetime

import pytest

from draftmerge.domain.time import Clock

FIXED_NOW = datetime(2024, 9, 9, 16, 0, tzinfo=UTC)


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def fixed_clock(fixed_now: datetime) -> Clock:
    def _clock() -> datetime:
        return fixed_now

    return _clock
