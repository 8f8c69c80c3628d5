"""
自定义异常模块

定义 ID 生成器相关的异常类，用于统一的错误处理。
所有异常都继承自 SnowflakeError，调用方可以统一捕获。

异常分类：
- InvalidIdentity: 构造时 worker id / group id 超出范围
- ClockRegression: 生成 ID 时检测到时钟回拨
- TimestampOverflow: 当前时间早于起始时间，或超出时间戳字段能表示的范围
"""
from __future__ import annotations


class SnowflakeError(Exception):
    """
    ID 生成器异常基类

    包含：
    - code: 错误码（用于日志和告警区分不同错误）
    - message: 错误消息

    使用示例：
        raise SnowflakeError(code=500000, message="unexpected")
    """

    def __init__(self, *, code: int, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


class InvalidIdentity(SnowflakeError):
    """
    身份参数非法

    worker id、group id（或组合的 machine id）不在 [0, maximum] 范围内。
    只在构造生成器时抛出，不会自动修正（不做截断）。
    """

    def __init__(self, *, field: str, value: int, maximum: int) -> None:
        super().__init__(
            code=400101,
            message=f"{field} must range from 0 to {maximum}, got {value}",
        )
        self.field = field
        self.value = value
        self.maximum = maximum


class ClockRegression(SnowflakeError):
    """
    时钟回拨

    当前时间小于上次生成 ID 使用的时间戳。生成器拒绝生成 ID，
    也不会自行重试；调用方决定等待、告警还是失败。
    生成器实例本身仍然可用，时钟追上后即可继续生成。
    """

    def __init__(self, *, last_timestamp: int, current_timestamp: int) -> None:
        offset_ms = last_timestamp - current_timestamp
        super().__init__(
            code=500201,
            message=f"Clock moved backwards by {offset_ms}ms. Refusing to generate id.",
        )
        self.offset_ms = offset_ms
        self.last_timestamp = last_timestamp
        self.current_timestamp = current_timestamp


class TimestampOverflow(SnowflakeError):
    """时间戳超出布局可表示的范围（早于起始时间或已过期）。"""

    def __init__(self, *, timestamp_delta: int, maximum: int) -> None:
        super().__init__(
            code=500202,
            message=f"Timestamp delta {timestamp_delta}ms is outside [0, {maximum}]",
        )
        self.timestamp_delta = timestamp_delta
        self.maximum = maximum
