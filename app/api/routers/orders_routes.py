# app/api/routers/orders_routes.py
from __future__ import annotations

from datetime import date as _date
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query

from app.api.deps import get_customer_id, get_order_portal_service
from app.api.problem import raise_problem
from app.api.routers.orders_helpers import (
    SYNCING_MESSAGE,
    to_detail_model,
    to_row_model,
    to_tracking_model,
)
from app.api.routers.orders_schemas import (
    OrderDetailModel,
    OrderListResponse,
    OrderTrackingModel,
)
from app.core.config import get_settings
from app.services.order_lifecycle_types import LifecycleStage
from app.services.order_portal_service import OrderPortalService
from app.services.order_repo import OrderListQuery

_STAGE_BY_KEY = {st.key: st for st in LifecycleStage}


def _parse_stage(stage: Optional[str]) -> Optional[LifecycleStage]:
    key = (stage or "").strip().lower()
    if not key or key == "all":
        return None
    if key not in _STAGE_BY_KEY:
        raise_problem(
            "invalid_stage",
            f"未知的生命周期阶段：{stage}",
            details=[{"type": "validation", "path": "stage", "reason": "unknown stage"}],
        )
    return _STAGE_BY_KEY[key]


def register(router: APIRouter) -> None:
    @router.get("", response_model=OrderListResponse)
    async def list_orders(
        page: int = Query(1, ge=1, description="页码（从 1 开始）"),
        page_size: Optional[int] = Query(None, ge=1, description="每页条数（默认 20，最大 100）"),
        stage: Optional[str] = Query(
            None,
            description="生命周期分类标签：not_arrived / arrived / customs_in_progress / "
            "customs_released / dispatching / delivered（all 或留空 = 全部）",
        ),
        keyword: Optional[str] = Query(None, description="订单号 / 提单号 / 柜号 模糊搜索"),
        start_date: Optional[_date] = Query(None, description="创建日期起（UTC，含）"),
        end_date: Optional[_date] = Query(None, description="创建日期止（UTC，含）"),
        ship_status: Optional[str] = Query(None, description="原始船期状态筛选，如 arrived / 已到港"),
        customs_status: Optional[str] = Query(None, description="原始清关状态筛选"),
        delivery_status: Optional[str] = Query(None, description="原始派送状态筛选"),
        customer_id: str = Depends(get_customer_id),
        svc: OrderPortalService = Depends(get_order_portal_service),
    ) -> OrderListResponse:
        """
        订单列表：

        - stage 筛选与行标签使用同一张规则表（SQL 谓词 / 进程内 classify 等价）
        - 读库不可达：返回空列表 + degraded=true（“数据正在同步中”）
        """
        settings = get_settings()
        size = min(page_size or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)
        q = OrderListQuery(
            customer_id=customer_id,
            page=page,
            page_size=size,
            stage=_parse_stage(stage),
            keyword=keyword,
            start_date=start_date,
            end_date=end_date,
            ship_status=ship_status,
            customs_status=customs_status,
            delivery_status=delivery_status,
        )
        result = await svc.list_orders(q)
        return OrderListResponse(
            list=[to_row_model(r) for r in result.rows],
            total=result.total,
            page=result.page,
            page_size=result.page_size,
            degraded=result.degraded,
            message=SYNCING_MESSAGE if result.degraded else None,
        )

    @router.get("/{order_id}", response_model=OrderDetailModel)
    async def get_order_detail(
        order_id: str = Path(..., description="订单 ID"),
        customer_id: str = Depends(get_customer_id),
        svc: OrderPortalService = Depends(get_order_portal_service),
    ) -> OrderDetailModel:
        """
        订单详情：原始字段 + 阶段 + 6 个运输进度节点（completed_count / total_steps）。
        他人订单与不存在的订单一样返回 404；读库不可达时只回显 id + degraded=true。
        """
        detail = await svc.get_detail(customer_id, order_id)
        if detail is None:
            raise_problem(
                "order_not_found",
                details=[{"type": "state", "order_id": order_id, "reason": "not found"}],
            )
        return to_detail_model(detail)

    @router.get("/{order_id}/tracking", response_model=OrderTrackingModel)
    async def get_order_tracking(
        order_id: str = Path(..., description="订单 ID"),
        customer_id: str = Depends(get_customer_id),
        svc: OrderPortalService = Depends(get_order_portal_service),
    ) -> OrderTrackingModel:
        """订单跟踪：仅返回运输进度投影（读库不可达：空节点 + degraded=true）。"""
        found = await svc.get_tracking(customer_id, order_id)
        if found is None:
            raise_problem("order_not_found")
        view, degraded = found
        return to_tracking_model(order_id, view, degraded=degraded)
