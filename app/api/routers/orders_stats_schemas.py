# app/api/routers/orders_stats_schemas.py
from __future__ import annotations

from typing import Dict, List, Literal

from pydantic import BaseModel, Field


class OrdersSummaryModel(BaseModel):
    """仪表盘汇总：total == in_progress + completed"""

    total: int = Field(..., description="订单总数")
    in_progress: int = Field(..., description="进行中（阶段 != delivered）")
    completed: int = Field(..., description="已完成（阶段 == delivered，含已归档 / 已取消）")
    total_weight: float = Field(..., description="总重量（缺失按 0）")
    total_volume: float = Field(..., description="总体积（缺失按 0）")
    by_stage: Dict[str, int] = Field(
        default_factory=dict,
        description="各生命周期阶段订单数（列表页分类标签角标）",
    )
    degraded: bool = Field(False, description="读库不可达时为 true，数值全为 0")


class OrdersTrendMonthModel(BaseModel):
    month: str = Field(..., description="YYYY-MM")
    label: str
    count: int
    weight: float
    volume: float


class OrdersTrendSummaryModel(BaseModel):
    count: int
    weight: float
    volume: float


class OrdersTrendResponseModel(BaseModel):
    date_field: Literal["created", "customs"]
    months: List[OrdersTrendMonthModel] = Field(
        default_factory=list,
        description="按月份升序排列、以当月结尾的趋势窗口（空月补零）",
    )
    summary: OrdersTrendSummaryModel
    degraded: bool = False
