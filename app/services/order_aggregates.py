# app/services/order_aggregates.py
from __future__ import annotations

from decimal import Decimal
from typing import Any, Iterable, Mapping

from sqlalchemy import Integer, Select, case, cast, func, not_, select

from app.services.order_classifier import classify
from app.services.order_lifecycle_types import LifecycleStage, OrderCounts
from app.services.order_stage_rules import completed_predicate, stage_case


def to_decimal(v: Any) -> Decimal:
    """weight / volume 归一：缺失按 0；float 走 str 避免二进制误差。"""
    if v is None:
        return Decimal("0")
    if isinstance(v, Decimal):
        return v
    return Decimal(str(v))


def count_records(records: Iterable[Any]) -> OrderCounts:
    """
    进程内汇总（已取回的记录）：

    - completed   : classify == DELIVERED
    - in_progress : classify != DELIVERED
    - total       : in_progress + completed
    - total_weight / total_volume : 缺失按 0
    """
    out = OrderCounts()
    for rec in records:
        stage = classify(rec)
        out.by_stage[stage] += 1
        if stage is LifecycleStage.DELIVERED:
            out.completed += 1
        else:
            out.in_progress += 1
        out.total_weight += to_decimal(getattr(rec, "weight", None))
        out.total_volume += to_decimal(getattr(rec, "volume", None))
    out.total = out.in_progress + out.completed
    return out


# ---------------------------------------------------------------------------
# 读库侧：同一套规则表编译出的计数 SQL
# ---------------------------------------------------------------------------


def _flag(pred: Any) -> Any:
    return func.coalesce(func.sum(case((pred, 1), else_=0)), 0)


def build_totals_query(model: Any, *where: Any) -> Select:
    done = completed_predicate(model)
    return select(
        func.count().label("total"),
        _flag(not_(done)).label("in_progress"),
        _flag(done).label("completed"),
        func.coalesce(func.sum(func.coalesce(model.weight, 0)), 0).label("total_weight"),
        func.coalesce(func.sum(func.coalesce(model.volume, 0)), 0).label("total_volume"),
    ).where(*where)


def build_by_stage_query(model: Any, *where: Any) -> Select:
    stage_no = cast(stage_case(model), Integer).label("stage_no")
    return select(stage_no, func.count().label("n")).where(*where).group_by(stage_no)


def counts_from_rows(totals: Mapping[str, Any], by_stage: Iterable[Mapping[str, Any]]) -> OrderCounts:
    out = OrderCounts(
        in_progress=int(totals.get("in_progress") or 0),
        completed=int(totals.get("completed") or 0),
        total_weight=to_decimal(totals.get("total_weight")),
        total_volume=to_decimal(totals.get("total_volume")),
    )
    out.total = out.in_progress + out.completed
    for row in by_stage:
        out.by_stage[LifecycleStage(int(row["stage_no"]))] = int(row["n"] or 0)
    return out
