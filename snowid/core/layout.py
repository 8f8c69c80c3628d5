"""
ID 位布局模块

定义 64 位 ID 的字段划分（从高位到低位）：
- 1 位：符号位，始终为 0（保证 ID 是非负的有符号 64 位整数）
- 41 位：时间戳（毫秒，从起始时间开始计算）
- 5 位：组 ID（机房 / 业务线，0-31）
- 5 位：机器 ID（组内的机器 / 进程，0-31）
- 12 位：序列号（同一毫秒内的序号，0-4095）

41 位时间戳大约能用 69 年，过期时间：
- standard 预设（2020-01-01 起）：2089-09-06T15:47:35.551Z
- twitter 预设（1288834974657 起）：2080-07-10T17:30:30.208Z
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing_extensions import Self

from snowid.enums import LayoutPreset

# 有符号 64 位整数去掉符号位后可用的位数
USABLE_BITS = 63

_UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _ms_to_datetime(ms: int) -> datetime:
    return _UNIX_EPOCH + timedelta(milliseconds=ms)


class IdParts(BaseModel):
    """解析后的 ID 各字段。"""

    model_config = ConfigDict(frozen=True)

    timestamp_delta: int  # 相对起始时间的毫秒数
    group_id: int
    worker_id: int
    sequence: int
    timestamp_ms: int  # Unix 毫秒时间戳

    @property
    def created_at(self) -> datetime:
        return _ms_to_datetime(self.timestamp_ms)


class BitLayout(BaseModel):
    """
    ID 位布局参数

    所有偏移量和最大值都由位宽推导：max = 2^bits - 1。
    布局不可变，构造时校验总位宽不超过 63 位。
    """

    model_config = ConfigDict(frozen=True)

    timestamp_bits: int = Field(default=41, ge=1)
    group_bits: int = Field(default=5, ge=1)
    worker_bits: int = Field(default=5, ge=1)
    sequence_bits: int = Field(default=12, ge=1)
    epoch_ms: int = Field(ge=0)
    # 新毫秒开始时序列号随机重置到 [0, sequence_seed_bound)
    sequence_seed_bound: int = Field(default=32, ge=1)

    @model_validator(mode="after")
    def _check_widths(self) -> Self:
        total = self.timestamp_bits + self.group_bits + self.worker_bits + self.sequence_bits
        if total > USABLE_BITS:
            raise ValueError(f"bit widths add up to {total}, at most {USABLE_BITS} are usable")
        if self.sequence_seed_bound > self.sequence_mask + 1:
            raise ValueError(
                f"sequence_seed_bound must not exceed {self.sequence_mask + 1}"
            )
        return self

    @property
    def max_worker_id(self) -> int:
        return ~(-1 << self.worker_bits)

    @property
    def max_group_id(self) -> int:
        return ~(-1 << self.group_bits)

    @property
    def sequence_mask(self) -> int:
        return ~(-1 << self.sequence_bits)

    @property
    def max_timestamp_delta(self) -> int:
        return ~(-1 << self.timestamp_bits)

    @property
    def worker_offset(self) -> int:
        return self.sequence_bits

    @property
    def group_offset(self) -> int:
        return self.sequence_bits + self.worker_bits

    @property
    def timestamp_offset(self) -> int:
        return self.sequence_bits + self.worker_bits + self.group_bits

    @property
    def epoch(self) -> datetime:
        return _ms_to_datetime(self.epoch_ms)

    @property
    def expires_at(self) -> datetime:
        """时间戳字段能表示的最后一毫秒，此后生成 ID 会抛出 TimestampOverflow。"""
        return _ms_to_datetime(self.epoch_ms + self.max_timestamp_delta)

    def identity_bits(self, *, group_id: int, worker_id: int) -> int:
        """组 ID 和机器 ID 所占的固定高位，构造生成器时预先计算。"""
        return (group_id << self.group_offset) | (worker_id << self.worker_offset)

    def compose(self, *, timestamp_delta: int, group_id: int, worker_id: int, sequence: int) -> int:
        """
        按布局拼装 ID

        Raises:
            ValueError: 任一字段超出其位宽
        """
        for name, value, maximum in (
            ("timestamp_delta", timestamp_delta, self.max_timestamp_delta),
            ("group_id", group_id, self.max_group_id),
            ("worker_id", worker_id, self.max_worker_id),
            ("sequence", sequence, self.sequence_mask),
        ):
            if not (0 <= value <= maximum):
                raise ValueError(f"{name} must be in [0, {maximum}], got {value}")
        return (
            (timestamp_delta << self.timestamp_offset)
            | self.identity_bits(group_id=group_id, worker_id=worker_id)
            | sequence
        )

    def decompose(self, value: int) -> IdParts:
        """
        按位移逆运算解析 ID

        Args:
            value: 由该布局生成的 ID

        Returns:
            IdParts: 各字段的值

        Raises:
            ValueError: 负数或超出布局总位宽的值
        """
        total_bits = self.timestamp_offset + self.timestamp_bits
        if value < 0 or value >> total_bits:
            raise ValueError(f"{value} is not a valid id for a {total_bits}-bit layout")
        timestamp_delta = value >> self.timestamp_offset
        return IdParts(
            timestamp_delta=timestamp_delta,
            group_id=(value >> self.group_offset) & self.max_group_id,
            worker_id=(value >> self.worker_offset) & self.max_worker_id,
            sequence=value & self.sequence_mask,
            timestamp_ms=timestamp_delta + self.epoch_ms,
        )


PRESETS: dict[LayoutPreset, BitLayout] = {
    LayoutPreset.standard: BitLayout(epoch_ms=1577836800000, sequence_seed_bound=32),
    LayoutPreset.twitter: BitLayout(epoch_ms=1288834974657, sequence_seed_bound=10),
}


def get_layout(preset: LayoutPreset | str) -> BitLayout:
    return PRESETS[LayoutPreset(preset)]
