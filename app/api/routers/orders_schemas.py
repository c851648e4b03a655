# app/api/routers/orders_schemas.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class OrderRowModel(BaseModel):
    """列表行：原始字段 + 统一判定后的阶段"""

    id: Optional[str] = Field(None, description="订单 ID（上游缺失时为 null）")
    order_number: Optional[str] = None
    bill_number: Optional[str] = Field(None, description="提单号")
    container_number: Optional[str] = Field(None, description="柜号")

    stage: str = Field(..., description="生命周期阶段 key，如 not_arrived / delivered")
    stage_label: str = Field(..., description="阶段中文标签")
    stage_color: str = Field(..., description="阶段 UI 颜色 class")

    raw_status: Optional[str] = Field(None, description="ERP 总状态原值")
    ship_status: Optional[str] = None
    customs_status: Optional[str] = None
    delivery_status: Optional[str] = None
    doc_swap_status: Optional[str] = None

    etd: Optional[datetime] = None
    eta: Optional[datetime] = None
    ata: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    weight: float = 0.0
    volume: float = 0.0
    pieces: Optional[int] = None


class OrderListResponse(BaseModel):
    list: List[OrderRowModel] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 20
    degraded: bool = Field(False, description="读库不可达时为 true，列表为空")
    message: Optional[str] = None


class ProgressStepModel(BaseModel):
    key: str
    label: str
    completed: bool
    occurred_at: Optional[datetime] = None


class OrderTrackingModel(BaseModel):
    order_id: str
    progress_steps: List[ProgressStepModel]
    current_step: Optional[str] = Field(None, description="第一个未完成节点；全部完成时为 null")
    completed_count: int
    total_steps: int
    degraded: bool = Field(False, description="读库不可达时为 true，progress_steps 为空")
    message: Optional[str] = None


class OrderDetailModel(OrderRowModel):
    # 降级时没有可判定的记录，阶段三件套为 null
    stage: Optional[str] = None
    stage_label: Optional[str] = None
    stage_color: Optional[str] = None

    doc_swap_time: Optional[datetime] = None
    customs_release_time: Optional[datetime] = None

    progress_steps: List[ProgressStepModel]
    current_step: Optional[str] = None
    completed_count: int
    total_steps: int

    degraded: bool = Field(False, description="读库不可达时为 true，只回显 id")
    message: Optional[str] = None
