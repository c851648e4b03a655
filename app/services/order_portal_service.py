# app/services/order_portal_service.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from app.obs.observer import PortalObserver
from app.services.order_classifier import classify, describe, unrecognized_fields
from app.services.order_lifecycle_types import (
    LifecycleStage,
    MalformedRecord,
    OrderCounts,
    OrderRecord,
    OrderTrend,
    ProgressView,
    StoreUnavailable,
    TrendDateField,
)
from app.services.order_progress import empty_view, project_view
from app.services.order_repo import OrderListQuery, OrderRepo
from app.services.order_trend import empty_trend


@dataclass
class OrderRow:
    record: OrderRecord
    stage: LifecycleStage
    display: Dict[str, Any]


@dataclass
class OrderPage:
    rows: List[OrderRow] = field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 20
    degraded: bool = False


@dataclass
class OrderDetail:
    order_id: str
    row: Optional[OrderRow]
    progress: ProgressView
    degraded: bool = False


class OrderPortalService:
    """
    门户订单服务：取数（OrderRepo）→ 纯函数判定（classify / project / 汇总）。

    降级口径（列表 / 详情 / 跟踪 / 统计 / 趋势一致）：读库不可达时返回空 / 全零结构
    并标记 degraded，绝不返回半截数据，也不把异常抛给路由层。
    """

    def __init__(self, session: AsyncSession, observer: PortalObserver) -> None:
        self.session = session
        self.repo = OrderRepo(session)
        self.observer = observer

    def _inspect(self, records: List[OrderRecord]) -> None:
        for rec in records:
            if rec.is_malformed:
                self.observer.malformed(MalformedRecord(rec))
        pairs = unrecognized_fields(records)
        if pairs:
            self.observer.unrecognized(pairs)

    @staticmethod
    def _row(rec: OrderRecord) -> OrderRow:
        return OrderRow(record=rec, stage=classify(rec), display=describe(rec))

    async def list_orders(self, q: OrderListQuery) -> OrderPage:
        self.observer.activity(
            q.customer_id,
            "view_orders",
            page=q.page,
            page_size=q.page_size,
            stage=q.stage.key if q.stage is not None else None,
            keyword=q.keyword,
        )
        try:
            records, total = await self.repo.list_orders(q)
        except StoreUnavailable as e:
            self.observer.store_unavailable("list", e)
            return OrderPage(page=q.page, page_size=q.page_size, degraded=True)

        self._inspect(records)
        return OrderPage(
            rows=[self._row(r) for r in records],
            total=total,
            page=q.page,
            page_size=q.page_size,
        )

    async def _load_one(self, op: str, customer_id: str, order_id: str) -> Tuple[Optional[OrderRecord], bool]:
        try:
            rec = await self.repo.get_order(customer_id, order_id)
        except StoreUnavailable as e:
            self.observer.store_unavailable(op, e)
            return None, True
        if rec is not None:
            self._inspect([rec])
        return rec, False

    async def get_detail(self, customer_id: str, order_id: str) -> Optional[OrderDetail]:
        """None = 订单不存在（或不属于该客户）；读库不可达返回 degraded 的空详情。"""
        self.observer.activity(customer_id, "view_order_detail", order_id=order_id)
        rec, degraded = await self._load_one("detail", customer_id, order_id)
        if degraded:
            return OrderDetail(order_id=order_id, row=None, progress=empty_view(), degraded=True)
        if rec is None:
            return None
        return OrderDetail(order_id=order_id, row=self._row(rec), progress=project_view(rec))

    async def get_tracking(
        self, customer_id: str, order_id: str
    ) -> Optional[Tuple[ProgressView, bool]]:
        self.observer.activity(customer_id, "view_order_tracking", order_id=order_id)
        rec, degraded = await self._load_one("tracking", customer_id, order_id)
        if degraded:
            return empty_view(), True
        if rec is None:
            return None
        return project_view(rec), False

    async def get_summary(self, customer_id: str) -> Tuple[OrderCounts, bool]:
        self.observer.activity(customer_id, "view_order_stats")
        try:
            return await self.repo.load_counts(customer_id), False
        except StoreUnavailable as e:
            self.observer.store_unavailable("stats", e)
            return OrderCounts(), True

    async def get_trend(
        self,
        customer_id: str,
        date_field: TrendDateField,
        *,
        months: int,
        now: Optional[datetime] = None,
    ) -> Tuple[OrderTrend, bool]:
        now = now or datetime.now(timezone.utc)
        try:
            trend = await self.repo.load_trend(customer_id, date_field, now=now, months=months)
            return trend, False
        except StoreUnavailable as e:
            self.observer.store_unavailable("trend", e)
            return empty_trend(date_field, now, months), True
