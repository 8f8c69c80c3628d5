"""
时钟回拨容忍模块

IdGenerator 本身遇到时钟回拨只会抛出 ClockRegression，不做重试。
这里提供一个调用方策略：对小幅回拨（不超过 tolerance_ms）等待时钟追上后重试，
超过容忍范围的回拨立即抛出，交给上层告警。

使用场景：
- NTP 校时造成的毫秒级回拨，等待即可恢复
- 人工修改系统时间造成的大幅回拨，应当立即失败
"""
import logging

from tenacity import (  # 重试库，用于实现重试机制
    RetryCallState,
    Retrying,
    before_sleep_log,  # 每次等待前记录日志
    retry_if_exception,  # 重试条件：按异常内容判断
    stop_after_delay,  # 停止条件：超过总等待时间
)

from snowid.core.config import settings
from snowid.core.snowflake import IdGenerator
from snowid.errors import ClockRegression

logger = logging.getLogger(__name__)


def _wait_for_clock(retry_state: RetryCallState) -> float:
    """等待策略：按回拨的毫秒数等待（秒）。"""
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    if isinstance(exc, ClockRegression):
        return exc.offset_ms / 1000
    return 0.0


def next_id_tolerating_regression(generator: IdGenerator, *, tolerance_ms: int | None = None) -> int:
    """
    生成 ID，对小幅时钟回拨等待后重试

    Args:
        generator: ID 生成器
        tolerance_ms: 可容忍的回拨毫秒数，默认取 SNOWFLAKE_CLOCK_TOLERANCE_MS

    Returns:
        64 位唯一 ID

    Raises:
        ClockRegression: 回拨超过容忍范围，或等待超时后时钟仍未追上
    """
    if tolerance_ms is None:
        tolerance_ms = settings.SNOWFLAKE_CLOCK_TOLERANCE_MS

    def _within_tolerance(exc: BaseException) -> bool:
        return isinstance(exc, ClockRegression) and exc.offset_ms <= tolerance_ms

    retryer = Retrying(
        retry=retry_if_exception(_within_tolerance),
        wait=_wait_for_clock,
        stop=stop_after_delay(tolerance_ms / 1000),
        before_sleep=before_sleep_log(logger, logging.WARN),
        reraise=True,  # 直接抛出 ClockRegression，而不是 RetryError
    )
    return retryer(generator.next_id)
