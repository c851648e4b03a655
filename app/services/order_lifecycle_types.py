# app/services/order_lifecycle_types.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import IntEnum
from typing import Any, Dict, List, Literal, Mapping, Optional

TrendDateField = Literal["created", "customs"]


class LifecycleStage(IntEnum):
    """
    订单生命周期阶段（派生值，不落库），按进度全序：

    NOT_ARRIVED < ARRIVED < CUSTOMS_IN_PROGRESS < CUSTOMS_RELEASED < DISPATCHING < DELIVERED
    """

    NOT_ARRIVED = 0
    ARRIVED = 1
    CUSTOMS_IN_PROGRESS = 2
    CUSTOMS_RELEASED = 3
    DISPATCHING = 4
    DELIVERED = 5

    @property
    def key(self) -> str:
        return self.name.lower()


# 列表页标签 / 颜色（每个阶段恰好一个，无兜底）
STAGE_LABELS: Dict[LifecycleStage, str] = {
    LifecycleStage.NOT_ARRIVED: "未到港",
    LifecycleStage.ARRIVED: "已到港",
    LifecycleStage.CUSTOMS_IN_PROGRESS: "清关中",
    LifecycleStage.CUSTOMS_RELEASED: "清关放行",
    LifecycleStage.DISPATCHING: "派送中",
    LifecycleStage.DELIVERED: "已送达",
}

STAGE_COLORS: Dict[LifecycleStage, str] = {
    LifecycleStage.NOT_ARRIVED: "bg-orange-100 text-orange-700",
    LifecycleStage.ARRIVED: "bg-cyan-100 text-cyan-700",
    LifecycleStage.CUSTOMS_IN_PROGRESS: "bg-yellow-100 text-yellow-700",
    LifecycleStage.CUSTOMS_RELEASED: "bg-purple-100 text-purple-700",
    LifecycleStage.DISPATCHING: "bg-blue-100 text-blue-700",
    LifecycleStage.DELIVERED: "bg-green-100 text-green-700",
}


@dataclass(frozen=True)
class OrderRecord:
    """
    订单读模型（ERP / 下单流程写入，本引擎只读）。

    - 所有状态字段保持原始字符串，解析交给 app.models.enums
    - 时间字段缺失 = “尚未发生”，不是错误
    - weight / volume 缺失按 0 计
    """

    id: Optional[str]
    customer_id: Optional[str] = None
    order_number: Optional[str] = None
    bill_number: Optional[str] = None
    container_number: Optional[str] = None

    overall_status: Optional[str] = None
    ship_status: Optional[str] = None
    customs_status: Optional[str] = None
    delivery_status: Optional[str] = None
    doc_swap_status: Optional[str] = None

    etd: Optional[datetime] = None
    eta: Optional[datetime] = None
    ata: Optional[datetime] = None
    doc_swap_time: Optional[datetime] = None
    customs_release_time: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    weight: Optional[Decimal] = None
    volume: Optional[Decimal] = None
    pieces: Optional[int] = None

    @classmethod
    def from_mapping(cls, row: Mapping[str, Any]) -> "OrderRecord":
        """容错构造：未知键忽略，缺失键取默认值（ORM 行 / SQL mappings / dict 通用）。"""
        names = cls.__dataclass_fields__.keys()
        return cls(**{k: row.get(k) for k in names if k != "id"}, id=row.get("id"))

    @property
    def is_malformed(self) -> bool:
        return self.id is None or str(self.id).strip() == ""


StepKey = Literal["accepted", "shipped", "arrived", "doc_swap", "customs", "delivered"]


@dataclass
class ProgressStep:
    """
    详情页运输进度节点（固定 6 个）：

    - key         : accepted / shipped / arrived / doc_swap / customs / delivered
    - label       : 中文标签
    - completed   : 该节点自身证据是否已出现
    - occurred_at : 节点时间（可能为 None）
    """

    key: StepKey
    label: str
    completed: bool
    occurred_at: Optional[datetime] = None


@dataclass
class ProgressView:
    steps: List[ProgressStep]
    current_step: Optional[StepKey]
    completed_count: int
    total_steps: int


@dataclass
class OrderCounts:
    """
    仪表盘汇总：total == in_progress + completed
    """

    total: int = 0
    in_progress: int = 0
    completed: int = 0
    total_weight: Decimal = Decimal("0")
    total_volume: Decimal = Decimal("0")
    by_stage: Dict[LifecycleStage, int] = field(
        default_factory=lambda: {st: 0 for st in LifecycleStage}
    )


@dataclass
class TrendBucket:
    month: str  # YYYY-MM
    label: str
    count: int = 0
    weight: Decimal = Decimal("0")
    volume: Decimal = Decimal("0")


@dataclass
class TrendSummary:
    count: int = 0
    weight: Decimal = Decimal("0")
    volume: Decimal = Decimal("0")


@dataclass
class OrderTrend:
    date_field: TrendDateField
    months: List[TrendBucket]
    summary: TrendSummary


class StoreUnavailable(Exception):
    """订单读库不可达（连接失败 / SQL 执行失败），由各消费方降级处理。"""

    def __init__(self, op: str, cause: BaseException | None = None) -> None:
        super().__init__(f"order store unavailable during {op}: {cause}")
        self.op = op
        self.cause = cause


class MalformedRecord(Exception):
    """上游数据缺少身份字段；classify / project 从不抛出它，仅供仓储层上报。"""

    def __init__(self, record: OrderRecord) -> None:
        super().__init__(f"order record without identity: {record!r}")
        self.record = record
