from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from snowid.core.layout import PRESETS, BitLayout, get_layout
from snowid.enums import LayoutPreset


def test_standard_preset_offsets_and_maxima():
    layout = get_layout(LayoutPreset.standard)
    assert (layout.timestamp_bits, layout.group_bits, layout.worker_bits, layout.sequence_bits) == (41, 5, 5, 12)
    assert layout.max_worker_id == 31
    assert layout.max_group_id == 31
    assert layout.sequence_mask == 4095
    assert (layout.worker_offset, layout.group_offset, layout.timestamp_offset) == (12, 17, 22)
    assert layout.epoch == datetime(2020, 1, 1, tzinfo=timezone.utc)


def test_preset_expiry_dates():
    assert get_layout("standard").expires_at == datetime(2089, 9, 6, 15, 47, 35, 551000, tzinfo=timezone.utc)
    assert get_layout("twitter").expires_at == datetime(2080, 7, 10, 17, 30, 30, 208000, tzinfo=timezone.utc)


def test_presets_differ_in_epoch_and_seed_bound():
    standard, twitter = PRESETS[LayoutPreset.standard], PRESETS[LayoutPreset.twitter]
    assert twitter.epoch_ms == 1288834974657
    assert (standard.sequence_seed_bound, twitter.sequence_seed_bound) == (32, 10)


def test_compose_and_decompose():
    layout = get_layout(LayoutPreset.twitter)
    value = layout.compose(timestamp_delta=123456789, group_id=30, worker_id=2, sequence=4000)
    parts = layout.decompose(value)
    assert parts.timestamp_delta == 123456789
    assert (parts.group_id, parts.worker_id, parts.sequence) == (30, 2, 4000)
    assert parts.timestamp_ms == 123456789 + 1288834974657
    assert parts.created_at.tzinfo is timezone.utc


def test_compose_rejects_wide_fields():
    layout = get_layout(LayoutPreset.standard)
    with pytest.raises(ValueError):
        layout.compose(timestamp_delta=0, group_id=0, worker_id=0, sequence=4096)
    with pytest.raises(ValueError):
        layout.compose(timestamp_delta=1 << 41, group_id=0, worker_id=0, sequence=0)


def test_decompose_rejects_invalid_values():
    layout = get_layout(LayoutPreset.standard)
    with pytest.raises(ValueError):
        layout.decompose(-1)
    with pytest.raises(ValueError):
        layout.decompose(1 << 63)


def test_custom_layout_validation():
    layout = BitLayout(timestamp_bits=39, group_bits=3, worker_bits=7, sequence_bits=14, epoch_ms=0)
    assert layout.max_worker_id == 127
    assert layout.max_group_id == 7
    assert layout.timestamp_offset == 24

    with pytest.raises(ValidationError):
        BitLayout(timestamp_bits=42, epoch_ms=0)
    with pytest.raises(ValidationError):
        BitLayout(sequence_bits=4, sequence_seed_bound=17, epoch_ms=0)
    with pytest.raises(ValidationError):
        BitLayout(worker_bits=0, epoch_ms=0)


def test_layout_is_frozen():
    layout = get_layout(LayoutPreset.standard)
    with pytest.raises(ValidationError):
        layout.worker_bits = 6  # type: ignore[misc]
