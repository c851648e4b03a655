# app/api/routers/orders_stats_helpers.py
from __future__ import annotations

from app.api.routers.orders_stats_schemas import (
    OrdersSummaryModel,
    OrdersTrendMonthModel,
    OrdersTrendResponseModel,
    OrdersTrendSummaryModel,
)
from app.services.order_lifecycle_types import OrderCounts, OrderTrend


def to_summary_model(counts: OrderCounts, *, degraded: bool) -> OrdersSummaryModel:
    return OrdersSummaryModel(
        total=counts.total,
        in_progress=counts.in_progress,
        completed=counts.completed,
        total_weight=float(counts.total_weight),
        total_volume=float(counts.total_volume),
        by_stage={st.key: n for st, n in sorted(counts.by_stage.items())},
        degraded=degraded,
    )


def to_trend_model(trend: OrderTrend, *, degraded: bool) -> OrdersTrendResponseModel:
    return OrdersTrendResponseModel(
        date_field=trend.date_field,
        months=[
            OrdersTrendMonthModel(
                month=b.month,
                label=b.label,
                count=b.count,
                weight=float(b.weight),
                volume=float(b.volume),
            )
            for b in trend.months
        ],
        summary=OrdersTrendSummaryModel(
            count=trend.summary.count,
            weight=float(trend.summary.weight),
            volume=float(trend.summary.volume),
        ),
        degraded=degraded,
    )
