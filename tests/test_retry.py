from __future__ import annotations

import pytest

from snowid.core import snowflake
from snowid.core.config import settings
from snowid.core.retry import next_id_tolerating_regression
from snowid.errors import ClockRegression

from .conftest import START_MS


def test_small_regression_is_waited_out(generator, clock):
    first = generator.next_id()

    # Two samples behind, then the clock catches up.
    clock.queue = [START_MS - 2, START_MS - 1, START_MS + 1]
    value = next_id_tolerating_regression(generator, tolerance_ms=50)
    assert value > first
    assert clock.calls == 4


def test_large_regression_propagates_immediately(generator, clock):
    generator.next_id()
    clock.now = START_MS - 10_000
    with pytest.raises(ClockRegression) as excinfo:
        next_id_tolerating_regression(generator, tolerance_ms=5000)
    assert excinfo.value.offset_ms == 10_000
    assert clock.calls == 2


def test_zero_tolerance_never_retries(generator, clock):
    generator.next_id()
    clock.now = START_MS - 1
    with pytest.raises(ClockRegression):
        next_id_tolerating_regression(generator, tolerance_ms=0)


def test_default_tolerance_from_settings(monkeypatch, clock):
    monkeypatch.setattr(settings, "SNOWFLAKE_CLOCK_TOLERANCE_MS", 0)
    gen = snowflake.IdGenerator(1, 1, clock=clock)
    gen.next_id()
    clock.now = START_MS - 1
    with pytest.raises(ClockRegression):
        next_id_tolerating_regression(gen)
