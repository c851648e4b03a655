# app/api/routers/orders_stats_routes.py
from __future__ import annotations

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_customer_id, get_order_portal_service
from app.api.routers.orders_stats_helpers import to_summary_model, to_trend_model
from app.api.routers.orders_stats_schemas import OrdersSummaryModel, OrdersTrendResponseModel
from app.core.config import get_settings
from app.services.order_portal_service import OrderPortalService


def register(router: APIRouter) -> None:
    @router.get(
        "/summary",
        response_model=OrdersSummaryModel,
    )
    async def get_orders_summary(
        customer_id: str = Depends(get_customer_id),
        svc: OrderPortalService = Depends(get_order_portal_service),
    ) -> OrdersSummaryModel:
        """
        订单汇总（仪表盘卡片 + 列表页分类角标）：

        - completed / in_progress 由同一张阶段规则表编译出的 SQL 谓词计数
        - 读库不可达：全零 + degraded=true
        """
        counts, degraded = await svc.get_summary(customer_id)
        return to_summary_model(counts, degraded=degraded)

    @router.get(
        "/trend",
        response_model=OrdersTrendResponseModel,
    )
    async def get_orders_trend(
        date_field: Literal["created", "customs"] = Query(
            "created",
            description="按哪个日期归月：created=下单时间，customs=清关放行时间",
        ),
        months: Optional[int] = Query(
            None,
            ge=1,
            le=24,
            description="窗口月数（默认 12，以当月结尾）",
        ),
        customer_id: str = Depends(get_customer_id),
        svc: OrderPortalService = Depends(get_order_portal_service),
    ) -> OrdersTrendResponseModel:
        """
        月度趋势：每月 count / weight / volume，空月补零；日期字段缺失的订单不计入。
        """
        window = months or get_settings().TREND_WINDOW_MONTHS
        trend, degraded = await svc.get_trend(customer_id, date_field, months=window)
        return to_trend_model(trend, degraded=degraded)
