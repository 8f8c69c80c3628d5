"""
应用配置模块

使用 Pydantic Settings 管理所有环境变量和配置。
配置从当前目录的 .env 文件读取，支持类型验证和默认值。

关键概念：
- BaseSettings: Pydantic 的配置基类，自动从环境变量读取
- computed_field: 计算字段，根据预设和覆盖项生成最终的位布局
- model_validator: 模型验证器，启动时检查位宽覆盖项是否合法
"""
from datetime import datetime, timezone
from typing import Literal

from pydantic import computed_field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing_extensions import Self

from snowid.core.layout import BitLayout, get_layout
from snowid.enums import LayoutPreset


class Settings(BaseSettings):
    """
    应用配置类

    配置来源优先级：
    1. 环境变量（最高优先级）
    2. .env 文件
    3. 代码中的默认值（最低优先级）
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,  # 忽略空的环境变量
        extra="ignore",  # 忽略未定义的额外字段
    )
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    LOG_LEVEL: str = "INFO"

    # Snowflake 位布局
    SNOWFLAKE_LAYOUT: LayoutPreset = LayoutPreset.standard
    SNOWFLAKE_EPOCH: datetime | None = None  # 覆盖预设的起始时间，不带时区按 UTC 处理
    SNOWFLAKE_TIMESTAMP_BITS: int | None = None
    SNOWFLAKE_GROUP_BITS: int | None = None
    SNOWFLAKE_WORKER_BITS: int | None = None
    SNOWFLAKE_SEQUENCE_BITS: int | None = None

    # Snowflake 身份
    SNOWFLAKE_WORKER_ID: int | None = None  # 未设置时根据本机 MAC 地址推导
    SNOWFLAKE_GROUP_ID: int = 0

    # 新毫秒开始时序列号是否随机重置（False 则固定从 0 开始）
    SNOWFLAKE_RANDOM_SEQUENCE_START: bool = True
    # 调用方容忍的时钟回拨上限（毫秒），见 snowid.core.retry
    SNOWFLAKE_CLOCK_TOLERANCE_MS: int = 5000

    @computed_field  # type: ignore[prop-decorator]
    @property
    def bit_layout(self) -> BitLayout:
        """
        计算字段：预设布局叠加环境变量中的覆盖项

        重新构造 BitLayout（而不是 model_copy），保证覆盖后的布局仍经过校验。

        Returns:
            最终使用的位布局
        """
        preset = get_layout(self.SNOWFLAKE_LAYOUT)
        overrides: dict[str, int] = {}
        if self.SNOWFLAKE_EPOCH is not None:
            epoch = self.SNOWFLAKE_EPOCH
            if epoch.tzinfo is None:
                epoch = epoch.replace(tzinfo=timezone.utc)
            overrides["epoch_ms"] = int(epoch.timestamp() * 1000)
        for name, value in (
            ("timestamp_bits", self.SNOWFLAKE_TIMESTAMP_BITS),
            ("group_bits", self.SNOWFLAKE_GROUP_BITS),
            ("worker_bits", self.SNOWFLAKE_WORKER_BITS),
            ("sequence_bits", self.SNOWFLAKE_SEQUENCE_BITS),
        ):
            if value is not None:
                overrides[name] = value
        if not overrides:
            return preset
        if self.SNOWFLAKE_SEQUENCE_BITS is not None:
            # 序列号位宽变小时，重置范围不能超过序列号空间
            overrides["sequence_seed_bound"] = min(
                preset.sequence_seed_bound, 1 << max(self.SNOWFLAKE_SEQUENCE_BITS, 0)
            )
        return BitLayout(**{**preset.model_dump(), **overrides})

    @model_validator(mode="after")
    def _validate_snowflake(self) -> Self:
        """
        模型验证器：配置加载完成后检查布局

        访问 bit_layout 以便非法的位宽覆盖在启动时就报错。

        Returns:
            self: 返回配置实例本身
        """
        _ = self.bit_layout
        return self


# 创建全局配置实例，整个应用共享
settings = Settings()  # type: ignore
