from __future__ import annotations

import os

import pytest

# Explicit identity for the module-level settings used by default-constructed generators.
os.environ.setdefault("SNOWFLAKE_WORKER_ID", "1")
os.environ.setdefault("SNOWFLAKE_GROUP_ID", "2")

from snowid.core import snowflake  # noqa: E402
from snowid.core.layout import get_layout  # noqa: E402
from snowid.enums import LayoutPreset  # noqa: E402

STANDARD = get_layout(LayoutPreset.standard)
# 2024-01-01T00:00:00Z
START_MS = 1704067200000


class FakeClock:
    """Returns queued values first, then sticks to ``now``."""

    def __init__(self, now: int) -> None:
        self.now = now
        self.queue: list[int] = []
        self.calls = 0

    def __call__(self) -> int:
        self.calls += 1
        if self.queue:
            self.now = self.queue.pop(0)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(START_MS)


@pytest.fixture
def generator(clock) -> snowflake.IdGenerator:
    return snowflake.IdGenerator(3, 7, layout=STANDARD, clock=clock, random_sequence_start=False)


@pytest.fixture(autouse=True)
def _reset_default_generator(monkeypatch):
    monkeypatch.setattr(snowflake, "_GENERATOR", None)
