# app/models/enums.py
from __future__ import annotations

from enum import Enum
from functools import lru_cache
from typing import Any, Dict, FrozenSet, Tuple, Type, TypeVar

ASCII_UPPER = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
ASCII_LOWER = "abcdefghijklmnopqrstuvwxyz"
# 首尾去掉的空白字符（SQL 侧 TRIM / BTRIM 用同一组）
STATUS_WHITESPACE = " \t\r\n"

_ASCII_LOWER = str.maketrans(ASCII_UPPER, ASCII_LOWER)


def normalize_raw_status(raw: Any) -> str:
    """
    原始状态字归一口径（SQL 侧 order_stage_rules.normalized_column 逐步对应）：

    1) NULL → ''
    2) 去两侧空白（STATUS_WHITESPACE：空格 / tab / 回车 / 换行）
    3) 只折叠 ASCII 大小写（中文和其它非 ASCII 字母原样保留，SQL 侧在各方言上同样只折叠 ASCII）
    4) '_' → ' '（兼容列表页 query 参数 not_arrived / in_transit 之类写法）
    """
    if raw is None:
        return ""
    return str(raw).strip(STATUS_WHITESPACE).translate(_ASCII_LOWER).replace("_", " ")


S = TypeVar("S", bound="RawStatus")


class RawStatus(str, Enum):
    """
    ERP 原始状态字段的“标签化变体”基类。

    每个子类必须定义：
    - UNSET         : NULL / 空串 / 纯空格
    - UNRECOGNIZED  : 上游新增的未知状态字（兜底，不抛错）
    - _aliases()    : 成员名 → 额外写法（中文 / 历史写法）
    """

    @classmethod
    def _aliases(cls) -> Dict[str, Tuple[str, ...]]:
        return {}

    @classmethod
    def known_members(cls: Type[S]) -> Tuple[S, ...]:
        return tuple(m for m in cls if m.name not in ("UNSET", "UNRECOGNIZED"))

    @classmethod
    def spellings_of(cls, member: "RawStatus") -> FrozenSet[str]:
        """某成员的全部归一后写法（含 value 本身）。"""
        extra = cls._aliases().get(member.name, ())
        return frozenset(normalize_raw_status(s) for s in (member.value, *extra))

    @classmethod
    def parse(cls: Type[S], raw: Any) -> S:
        """全函数：任何输入都映射到一个成员，绝不抛错。"""
        key = normalize_raw_status(raw)
        if not key:
            return cls["UNSET"]
        return _lookup(cls).get(key, cls["UNRECOGNIZED"])


@lru_cache(maxsize=None)
def _lookup(cls: Type[RawStatus]) -> Dict[str, RawStatus]:
    table: Dict[str, RawStatus] = {}
    for member in cls.known_members():
        for spelling in cls.spellings_of(member):
            table[spelling] = member
    return table


class OverallStatus(RawStatus):
    """订单总状态（ERP 兜底字段）"""

    UNSET = "unset"
    UNRECOGNIZED = "unrecognized"
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ARCHIVED = "archived"
    CANCELLED = "cancelled"
    REJECTED = "rejected"

    @classmethod
    def _aliases(cls) -> Dict[str, Tuple[str, ...]]:
        return {
            "PENDING": ("待处理", "待审核", "草稿"),
            "PROCESSING": ("进行中", "处理中"),
            "COMPLETED": ("已完成",),
            "ARCHIVED": ("已归档",),
            "CANCELLED": ("已取消", "canceled"),
            "REJECTED": ("已拒绝",),
        }


class ShipStatus(RawStatus):
    """海运 / 空运段状态"""

    UNSET = "unset"
    UNRECOGNIZED = "unrecognized"
    NOT_ARRIVED = "not arrived"
    SHIPPED = "shipped"
    IN_TRANSIT = "in transit"
    ARRIVED = "arrived"

    @classmethod
    def _aliases(cls) -> Dict[str, Tuple[str, ...]]:
        return {
            "NOT_ARRIVED": ("未到港", "待发运"),
            "SHIPPED": ("已发运",),
            "IN_TRANSIT": ("运输中",),
            "ARRIVED": ("已到港",),
        }


class CustomsStatus(RawStatus):
    """清关状态"""

    UNSET = "unset"
    UNRECOGNIZED = "unrecognized"
    IN_CUSTOMS = "in customs"
    INSPECTION = "inspection"
    RELEASED = "released"

    @classmethod
    def _aliases(cls) -> Dict[str, Tuple[str, ...]]:
        return {
            "IN_CUSTOMS": ("清关中",),
            "INSPECTION": ("查验中",),
            "RELEASED": ("已放行", "清关放行", "cleared"),
        }


class DeliveryStatus(RawStatus):
    """尾程派送状态"""

    UNSET = "unset"
    UNRECOGNIZED = "unrecognized"
    PENDING_DISPATCH = "pending dispatch"
    DISPATCHING = "dispatching"
    DELIVERED = "delivered"
    EXCEPTION_CLOSED = "exception-closed"

    @classmethod
    def _aliases(cls) -> Dict[str, Tuple[str, ...]]:
        return {
            "PENDING_DISPATCH": ("待派送",),
            "DISPATCHING": ("派送中", "delivering"),
            "DELIVERED": ("已送达", "已签收"),
            "EXCEPTION_CLOSED": ("异常关闭", "exception closed"),
        }


class DocSwapStatus(RawStatus):
    """换单状态"""

    UNSET = "unset"
    UNRECOGNIZED = "unrecognized"
    IN_PROGRESS = "in progress"
    COMPLETED = "completed"

    @classmethod
    def _aliases(cls) -> Dict[str, Tuple[str, ...]]:
        return {
            "IN_PROGRESS": ("换单中",),
            "COMPLETED": ("已换单", "换单完成"),
        }
