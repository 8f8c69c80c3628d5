"""
枚举类型定义模块

所有枚举都继承自 str 和 Enum，既可以直接作为字符串使用（如读取环境变量），
又具有枚举的类型安全。
"""
from enum import Enum


class LayoutPreset(str, Enum):
    """
    ID 位布局预设

    两种历史布局的位宽相同（41/5/5/12），区别在于起始时间和序列号重置范围：
    - standard: 起始时间 2020-01-01T00:00:00Z，新毫秒序列号随机重置到 [0, 32)
    - twitter: 起始时间 1288834974657（Twitter 纪元），序列号随机重置到 [0, 10)
    """
    standard = "standard"
    twitter = "twitter"


class TickState(str, Enum):
    """
    单次 next_id 调用的状态

    - advanced: 进入新的毫秒，序列号重新播种
    - same_tick: 同一毫秒内，序列号递增
    - exhausted: 同一毫秒内序列号用完，自旋等待到下一毫秒
    """
    advanced = "advanced"
    same_tick = "same_tick"
    exhausted = "exhausted"
