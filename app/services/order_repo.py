# app/services/order_repo.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.portal_order import PortalOrder
from app.services.order_aggregates import (
    build_by_stage_query,
    build_totals_query,
    counts_from_rows,
    to_decimal,
)
from app.services.order_lifecycle_types import (
    LifecycleStage,
    OrderCounts,
    OrderRecord,
    OrderTrend,
    StoreUnavailable,
    TrendDateField,
    TrendSummary,
)
from app.services.order_stage_rules import raw_status_predicate, stage_predicate
from app.services.order_trend import TREND_DATE_COLUMNS, build_trend, window_bounds

UTC = timezone.utc

_ORDER_COLUMNS = tuple(PortalOrder.__table__.c)

LIKE_ESCAPE = "\\"


def _escape_like(kw: str) -> str:
    """关键字按字面匹配：% _ \\ 前加转义符"""
    return (
        kw.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


@dataclass
class OrderListQuery:
    customer_id: str
    page: int = 1
    page_size: int = 20
    stage: Optional[LifecycleStage] = None
    keyword: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    ship_status: Optional[str] = None
    customs_status: Optional[str] = None
    delivery_status: Optional[str] = None


class OrderRepo:
    """
    订单读库访问（只读）。

    所有 SQLAlchemy / 连接层异常统一包装成 StoreUnavailable，
    是否降级由上层各消费方决定。
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _execute(self, op: str, stmt: Any):
        try:
            return await self.session.execute(stmt)
        except (SQLAlchemyError, OSError) as e:
            raise StoreUnavailable(op, e) from e

    # ---------------- 列表 ----------------

    def _list_filters(self, q: OrderListQuery) -> List[Any]:
        clauses: List[Any] = [PortalOrder.customer_id == q.customer_id]

        if q.stage is not None:
            clauses.append(stage_predicate(q.stage, PortalOrder))

        for field in ("ship_status", "customs_status", "delivery_status"):
            pred = raw_status_predicate(field, getattr(q, field), PortalOrder)
            if pred is not None:
                clauses.append(pred)

        kw = (q.keyword or "").strip()
        if kw:
            like = f"%{_escape_like(kw)}%"
            clauses.append(
                or_(
                    PortalOrder.order_number.ilike(like, escape=LIKE_ESCAPE),
                    PortalOrder.bill_number.ilike(like, escape=LIKE_ESCAPE),
                    PortalOrder.container_number.ilike(like, escape=LIKE_ESCAPE),
                )
            )

        # 日期区间按 UTC 自然日，闭区间 [start_date, end_date]
        if q.start_date is not None:
            clauses.append(PortalOrder.created_at >= datetime.combine(q.start_date, time(0), tzinfo=UTC))
        if q.end_date is not None:
            end = datetime.combine(q.end_date, time(0), tzinfo=UTC) + timedelta(days=1)
            clauses.append(PortalOrder.created_at < end)

        return clauses

    async def list_orders(self, q: OrderListQuery) -> Tuple[List[OrderRecord], int]:
        clauses = self._list_filters(q)

        total_res = await self._execute(
            "list", select(func.count()).select_from(PortalOrder).where(*clauses)
        )
        total = int(total_res.scalar() or 0)

        stmt = (
            select(*_ORDER_COLUMNS)
            .where(*clauses)
            .order_by(PortalOrder.created_at.desc(), PortalOrder.id.desc())
            .offset((q.page - 1) * q.page_size)
            .limit(q.page_size)
        )
        res = await self._execute("list", stmt)
        return [OrderRecord.from_mapping(m) for m in res.mappings().all()], total

    # ---------------- 详情 ----------------

    async def get_order(self, customer_id: str, order_id: str) -> Optional[OrderRecord]:
        stmt = select(*_ORDER_COLUMNS).where(
            PortalOrder.id == order_id,
            PortalOrder.customer_id == customer_id,
        )
        res = await self._execute("detail", stmt)
        row = res.mappings().first()
        return OrderRecord.from_mapping(row) if row else None

    # ---------------- 统计 ----------------

    async def load_counts(self, customer_id: str) -> OrderCounts:
        where = (PortalOrder.customer_id == customer_id,)
        totals = (await self._execute("stats", build_totals_query(PortalOrder, *where))).mappings().one()
        by_stage = (await self._execute("stats", build_by_stage_query(PortalOrder, *where))).mappings().all()
        return counts_from_rows(totals, by_stage)

    async def load_trend(
        self,
        customer_id: str,
        date_field: TrendDateField,
        *,
        now: datetime,
        months: int,
    ) -> OrderTrend:
        col = getattr(PortalOrder, TREND_DATE_COLUMNS[date_field])
        start, end = window_bounds(now, months)
        where = (
            PortalOrder.customer_id == customer_id,
            col.is_not(None),
            col >= start,
            col < end,
        )

        rows = await self._execute(
            "trend",
            select(PortalOrder.id, col, PortalOrder.weight, PortalOrder.volume).where(*where),
        )
        records = [OrderRecord.from_mapping(m) for m in rows.mappings().all()]
        trend = build_trend(records, date_field, now=now, months=months)

        # summary 独立由 SQL 聚合，不从各月相加
        agg = await self._execute(
            "trend",
            select(
                func.count().label("n"),
                func.coalesce(func.sum(func.coalesce(PortalOrder.weight, 0)), 0).label("w"),
                func.coalesce(func.sum(func.coalesce(PortalOrder.volume, 0)), 0).label("v"),
            ).where(*where),
        )
        row = agg.mappings().one()
        trend.summary = TrendSummary(
            count=int(row["n"] or 0),
            weight=to_decimal(row["w"]),
            volume=to_decimal(row["v"]),
        )
        return trend
