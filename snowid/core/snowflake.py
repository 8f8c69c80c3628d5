"""
Snowflake ID 生成器模块

实现 Twitter Snowflake 算法，生成分布式唯一 ID。
各进程分配不同的 (group id, worker id) 后独立生成 ID，无需任何协调服务。

ID 结构（64 位，见 snowid.core.layout）：
- 1 位：符号位，始终为 0
- 41 位：时间戳（毫秒，从起始时间开始）
- 5 位：组 ID（0-31，机房 / 业务线）
- 5 位：机器 ID（0-31，组内的机器 / 进程）
- 12 位：序列号（同一毫秒内的序号，0-4095）

保证：
- 同一个实例生成的 ID 互不相同
- 同一个实例按调用顺序生成的 ID 单调递增（按 (时间戳, 序列号) 比较）
- 不同实例之间的唯一性依赖于运维分配不重复的身份
"""
from __future__ import annotations

import logging
import secrets
import threading  # 线程锁，用于并发安全
import time  # 时间处理
from collections.abc import Callable

from snowid.core.config import settings
from snowid.core.identity import HardwareIdProvider, derive_worker_id, mac_address_bytes, split_machine_id
from snowid.core.layout import BitLayout, IdParts
from snowid.enums import TickState
from snowid.errors import ClockRegression, InvalidIdentity, TimestampOverflow

logger = logging.getLogger(__name__)

# 返回 Unix 毫秒时间戳的时钟
Clock = Callable[[], int]


def _now_ms() -> int:
    """获取当前时间的毫秒时间戳"""
    return time.time_ns() // 1_000_000


class IdGenerator:
    """
    64 位 Snowflake ID 生成器

    构造方式（对应三种默认值场景）：
        IdGenerator(worker_id, group_id)
        IdGenerator(worker_id)   # group id 取 SNOWFLAKE_GROUP_ID
        IdGenerator()            # worker id 取 SNOWFLAKE_WORKER_ID，未配置时由 MAC 地址推导

    每个实例有自己的锁，next_id 的读-改-写在锁内完成。
    默认布局下每个实例每毫秒最多生成 4096 个 ID。
    """

    def __init__(
        self,
        worker_id: int | None = None,
        group_id: int | None = None,
        *,
        layout: BitLayout | None = None,
        clock: Clock | None = None,
        random_sequence_start: bool | None = None,
        identity_provider: HardwareIdProvider | None = None,
    ) -> None:
        """
        初始化 Snowflake 生成器

        Args:
            worker_id: 机器 ID，None 时使用配置或由硬件标识推导
            group_id: 组 ID，None 时使用 SNOWFLAKE_GROUP_ID
            layout: 位布局，None 时使用配置中的布局
            clock: 返回 Unix 毫秒时间戳的时钟，主要用于测试
            random_sequence_start: 新毫秒时是否随机重置序列号，None 时使用配置
            identity_provider: 推导 worker id 时使用的硬件标识来源

        Raises:
            InvalidIdentity: 当 worker id 或 group id 不在有效范围内时
        """
        self._layout = layout if layout is not None else settings.bit_layout
        if group_id is None:
            group_id = settings.SNOWFLAKE_GROUP_ID
        if worker_id is None:
            worker_id = settings.SNOWFLAKE_WORKER_ID
        if worker_id is None:
            # 推导出的 worker id 不保证集群内唯一，只告警不阻止构造
            logger.warning(
                "SNOWFLAKE_WORKER_ID is not set, deriving a worker id from the local hardware id. "
                f"Not safe for multi-process deployments (environment={settings.ENVIRONMENT})."
            )
            worker_id = derive_worker_id(
                self._layout.max_worker_id,
                identity_provider if identity_provider is not None else mac_address_bytes,
            )

        if not (0 <= worker_id <= self._layout.max_worker_id):
            raise InvalidIdentity(field="worker_id", value=worker_id, maximum=self._layout.max_worker_id)
        if not (0 <= group_id <= self._layout.max_group_id):
            raise InvalidIdentity(field="group_id", value=group_id, maximum=self._layout.max_group_id)

        self._worker_id = worker_id
        self._group_id = group_id
        # 所有 ID 共用的组 ID + 机器 ID 高位
        self._identity_bits = self._layout.identity_bits(group_id=group_id, worker_id=worker_id)
        self._clock = clock if clock is not None else _now_ms
        if random_sequence_start is None:
            random_sequence_start = settings.SNOWFLAKE_RANDOM_SEQUENCE_START
        self._random_sequence_start = random_sequence_start

        self._lock = threading.Lock()
        self._last_ts = -1  # 上次生成 ID 的时间戳（毫秒）
        self._seq = 0
        self._last_state: TickState | None = None

    @classmethod
    def from_machine_id(cls, machine_id: int, **kwargs) -> IdGenerator:
        """
        使用组合的 machine id 构造（高位为 worker id，低位为 group id）

        Raises:
            InvalidIdentity: 当 machine id 超出 worker_bits + group_bits 位时
        """
        layout = kwargs.get("layout") or settings.bit_layout
        worker_id, group_id = split_machine_id(machine_id, layout)
        return cls(worker_id, group_id, **kwargs)

    @property
    def worker_id(self) -> int:
        return self._worker_id

    @property
    def group_id(self) -> int:
        return self._group_id

    @property
    def layout(self) -> BitLayout:
        return self._layout

    @property
    def last_state(self) -> TickState | None:
        """最近一次成功调用 next_id 时所处的状态，尚未生成过 ID 时为 None。"""
        return self._last_state

    def _reseed(self) -> int:
        if self._random_sequence_start:
            return secrets.randbelow(self._layout.sequence_seed_bound)
        return 0

    def next_id(self) -> int:
        """
        生成下一个唯一 ID

        线程安全，支持并发调用。

        Returns:
            64 位非负整数 ID

        Raises:
            ClockRegression: 当前时间早于上次使用的时间戳时（不会自动重试）
            TimestampOverflow: 当前时间早于起始时间或超出布局的有效期时

        算法说明：
        1. 获取当前时间戳
        2. 如果时间戳小于上次时间，说明时钟回拨，直接报错
        3. 如果时间戳相同，递增序列号；序列号溢出回到 0 时自旋等待下一毫秒
        4. 如果是新的毫秒，重置序列号（随机小值或 0）
        5. 组合时间戳、组 ID、机器 ID 和序列号生成最终 ID
        """
        with self._lock:  # 加锁，确保线程安全
            ts = self._clock()
            if ts < self._last_ts:
                # 时钟回拨检测，交由调用方处理
                error = ClockRegression(last_timestamp=self._last_ts, current_timestamp=ts)
                logger.warning(error.message)
                raise error

            if ts == self._last_ts:
                seq = (self._seq + 1) & self._layout.sequence_mask
                state = TickState.same_tick
                if seq == 0:
                    # 序列号溢出，等待下一毫秒
                    ts = self._wait_next_millis(self._last_ts)
                    state = TickState.exhausted
            else:
                seq = self._reseed()
                state = TickState.advanced

            delta = ts - self._layout.epoch_ms
            if not (0 <= delta <= self._layout.max_timestamp_delta):
                # 失败的调用不改变序列状态
                raise TimestampOverflow(timestamp_delta=delta, maximum=self._layout.max_timestamp_delta)

            self._last_ts = ts
            self._seq = seq
            self._last_state = state
            return (delta << self._layout.timestamp_offset) | self._identity_bits | seq

    def _wait_next_millis(self, last_ts: int) -> int:
        """
        自旋等待直到时钟超过 last_ts

        与主流程使用同一个时钟，每次采样之间让出 CPU。

        Returns:
            大于 last_ts 的时间戳
        """
        ts = self._clock()
        while ts <= last_ts:
            time.sleep(0)
            ts = self._clock()
        return ts

    def decode(self, value: int) -> IdParts:
        """按本实例的布局解析 ID。"""
        return self._layout.decompose(value)


# 全局生成器实例（单例模式）
_GENERATOR: IdGenerator | None = None
_GENERATOR_LOCK = threading.Lock()


def _get_generator() -> IdGenerator:
    """
    获取全局 Snowflake 生成器实例（单例模式）

    第一次调用时根据配置创建实例，后续调用返回同一个实例。

    Returns:
        IdGenerator 实例
    """
    global _GENERATOR
    if _GENERATOR is None:
        with _GENERATOR_LOCK:
            if _GENERATOR is None:
                _GENERATOR = IdGenerator()
    return _GENERATOR


def generate_id() -> int:
    """
    生成唯一 ID（便捷函数）

    内部使用单例的 Snowflake 生成器。

    示例：
        >>> order_id = generate_id()
    """
    return _get_generator().next_id()
