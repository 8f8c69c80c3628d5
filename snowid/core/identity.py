"""
机器身份推导模块

在没有显式配置 worker id 时，根据本机网卡 MAC 地址推导一个默认值：
MAC 地址各字节求和，再对 worker id 的取值范围取模。

注意：
- 不同机器的 MAC 字节和可能相同，推导结果不保证集群内唯一
- 取不到 MAC 地址时退化为随机值，更不适合生产环境
- 生产环境应通过 SNOWFLAKE_WORKER_ID 显式分配
"""
from __future__ import annotations

import logging
import secrets
import uuid
from collections.abc import Callable

from snowid.core.layout import BitLayout
from snowid.errors import InvalidIdentity

logger = logging.getLogger(__name__)

# 返回本机硬件标识（如 MAC 地址字节），取不到时返回 None
HardwareIdProvider = Callable[[], bytes | None]

# uuid.getnode() 取不到真实网卡时返回随机数，并设置组播位
_MULTICAST_BIT = 1 << 40


def mac_address_bytes() -> bytes | None:
    """
    获取本机 MAC 地址

    Returns:
        6 字节的 MAC 地址；uuid.getnode() 返回的是随机值时返回 None
    """
    node = uuid.getnode()
    if node & _MULTICAST_BIT:
        return None
    return node.to_bytes(6, "big")


def derive_worker_id(max_worker_id: int, provider: HardwareIdProvider = mac_address_bytes) -> int:
    """
    根据硬件标识推导默认 worker id

    Args:
        max_worker_id: worker id 最大值（2^bits - 1）
        provider: 硬件标识来源，默认读取本机 MAC 地址

    Returns:
        [0, max_worker_id] 内的 worker id
    """
    try:
        hardware_id = provider()
    except OSError as e:
        logger.warning(f"Failed to read hardware id: {e}")
        hardware_id = None

    if hardware_id:
        logger.info("Using local MAC address for worker id")
        return sum(hardware_id) % (max_worker_id + 1)

    logger.warning("No hardware id available, using a random worker id. Not suitable for production.")
    return secrets.randbelow(max_worker_id + 1)


def split_machine_id(machine_id: int, layout: BitLayout) -> tuple[int, int]:
    """
    拆分组合的 machine id

    machine id 占 worker_bits + group_bits 位，高位是 worker id，低位是 group id。

    Returns:
        (worker_id, group_id)

    Raises:
        InvalidIdentity: machine id 超出范围时
    """
    maximum = ~(-1 << (layout.worker_bits + layout.group_bits))
    if not (0 <= machine_id <= maximum):
        raise InvalidIdentity(field="machine_id", value=machine_id, maximum=maximum)
    return machine_id >> layout.group_bits, machine_id & layout.max_group_id
