from snowid.core.layout import PRESETS, BitLayout, IdParts, get_layout
from snowid.core.snowflake import IdGenerator, generate_id
from snowid.enums import LayoutPreset, TickState
from snowid.errors import ClockRegression, InvalidIdentity, SnowflakeError, TimestampOverflow

__all__ = [
    "PRESETS",
    "BitLayout",
    "ClockRegression",
    "IdGenerator",
    "IdParts",
    "InvalidIdentity",
    "LayoutPreset",
    "SnowflakeError",
    "TickState",
    "TimestampOverflow",
    "generate_id",
    "get_layout",
]
