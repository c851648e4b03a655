# app/services/order_trend.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from app.services.order_aggregates import to_decimal
from app.services.order_lifecycle_types import (
    OrderTrend,
    TrendBucket,
    TrendDateField,
    TrendSummary,
)

# date_field → OrderRecord 属性 / portal_orders 列
TREND_DATE_COLUMNS: Dict[str, str] = {
    "created": "created_at",
    "customs": "customs_release_time",
}

UTC = timezone.utc


def _as_utc_naive(ts: datetime) -> datetime:
    # 统一按 UTC 自然月归桶；naive 值视为 UTC
    if ts.tzinfo is not None:
        ts = ts.astimezone(UTC)
    return ts.replace(tzinfo=None)


def month_window(now: datetime, months: int = 12) -> List[Tuple[int, int]]:
    """以当月为终点（含）的连续 N 个自然月，升序。"""
    if months < 1:
        raise ValueError("months must be >= 1")
    cur = _as_utc_naive(now)
    idx = cur.year * 12 + (cur.month - 1)
    return [divmod(i, 12) for i in range(idx - months + 1, idx + 1)]


def window_bounds(now: datetime, months: int = 12) -> Tuple[datetime, datetime]:
    """窗口 [首月 1 号 00:00, 次月 1 号 00:00)，UTC aware。"""
    win = month_window(now, months)
    y0, m0 = win[0]
    y1, m1 = divmod(win[-1][0] * 12 + win[-1][1] + 1, 12)
    return (
        datetime(y0, m0 + 1, 1, tzinfo=UTC),
        datetime(y1, m1 + 1, 1, tzinfo=UTC),
    )


def _month_key(year: int, month0: int) -> str:
    return f"{year:04d}-{month0 + 1:02d}"


def empty_trend(date_field: TrendDateField, now: datetime, months: int = 12) -> OrderTrend:
    """全零窗口：读库不可达时仪表盘仍拿到可渲染结构。"""
    buckets = [
        TrendBucket(month=_month_key(y, m0), label=f"{m0 + 1}月")
        for y, m0 in month_window(now, months)
    ]
    return OrderTrend(date_field=date_field, months=buckets, summary=TrendSummary())


def _date_of(record: Any, date_field: TrendDateField) -> Optional[datetime]:
    return getattr(record, TREND_DATE_COLUMNS[date_field], None)


def build_trend(
    records: Iterable[Any],
    date_field: TrendDateField,
    *,
    now: datetime,
    months: int = 12,
) -> OrderTrend:
    """
    按自然月归桶（created_at 或 customs_release_time）：

    - 日期字段缺失的记录整体排除（不会因缺失时间落进任何桶）
    - 窗口外的记录排除
    - summary 独立累计，不由各月相加得到（二者相等是可测不变量）
    """
    if date_field not in TREND_DATE_COLUMNS:
        raise ValueError(f"unsupported date_field: {date_field!r}")

    trend = empty_trend(date_field, now, months)
    by_key = {b.month: b for b in trend.months}
    summary = trend.summary

    for rec in records:
        ts = _date_of(rec, date_field)
        if ts is None:
            continue
        ts = _as_utc_naive(ts)
        bucket = by_key.get(_month_key(ts.year, ts.month - 1))
        if bucket is None:
            continue
        weight = to_decimal(getattr(rec, "weight", None))
        volume = to_decimal(getattr(rec, "volume", None))

        bucket.count += 1
        bucket.weight += weight
        bucket.volume += volume

        summary.count += 1
        summary.weight += weight
        summary.volume += volume

    return trend
