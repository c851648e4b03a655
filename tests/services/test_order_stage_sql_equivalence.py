# tests/services/test_order_stage_sql_equivalence.py
from __future__ import annotations

from collections import Counter
from itertools import product
from typing import Dict, List

import pytest
from sqlalchemy import Integer, cast, literal, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import normalize_raw_status
from app.models.portal_order import PortalOrder
from app.services.order_aggregates import build_by_stage_query, build_totals_query
from app.services.order_classifier import classify
from app.services.order_lifecycle_types import LifecycleStage, OrderRecord
from app.services.order_stage_rules import (
    completed_predicate,
    normalized_column,
    stage_case,
    stage_predicate,
)
from tests.helpers.orders import CUSTOMER, order_row, seed_orders

# 每个字段：NULL / 空白 / 各种合法写法（大小写、下划线、中文、首尾空格）/ 未识别值
OVERALL = [None, "", "  ", "pending", "processing", "COMPLETED", "已完成", " archived ", "已取消",
           "canceled", "rejected", "mystery"]
SHIP = [None, "", "\t", "not_arrived", "Shipped", "in transit", "arrived", "已到港", "docked"]
CUSTOMS = [None, "  ", "in_customs", "INSPECTION", "released", "已放行", "held"]
DELIVERY = [None, "", "pending dispatch", "Dispatching", "delivered", "\tdelivered",
            "delivered\r\n", "DEL\u0130VERED", "exception_closed", "已签收", "lost"]


def _grid() -> List[Dict]:
    return [
        order_row(
            overall_status=o,
            ship_status=s,
            customs_status=c,
            delivery_status=d,
            weight=1,
        )
        for o, s, c, d in product(OVERALL, SHIP, CUSTOMS, DELIVERY)
    ]


async def _seed(session: AsyncSession) -> Dict[str, LifecycleStage]:
    rows = _grid()
    await seed_orders(session, rows)
    return {r["id"]: classify(OrderRecord.from_mapping(r)) for r in rows}


@pytest.mark.asyncio
async def test_stage_predicate_matches_classify_exhaustively(session: AsyncSession):
    """
    SQL 谓词与进程内判定逐行一致：
    - 每个阶段谓词选出的 id 集合 == classify 判到该阶段的 id 集合
    - 各阶段谓词两两不相交且覆盖全部行
    """
    expected = await _seed(session)

    seen: set[str] = set()
    for stage in LifecycleStage:
        res = await session.execute(
            select(PortalOrder.id).where(
                PortalOrder.customer_id == CUSTOMER, stage_predicate(stage, PortalOrder)
            )
        )
        got = set(res.scalars().all())
        want = {oid for oid, st in expected.items() if st is stage}
        assert got == want, f"stage={stage.key} sql-only={sorted(got - want)[:5]} py-only={sorted(want - got)[:5]}"
        assert not (got & seen)
        seen |= got

    assert seen == set(expected)


@pytest.mark.asyncio
async def test_stage_case_matches_classify(session: AsyncSession):
    expected = await _seed(session)

    res = await session.execute(
        select(PortalOrder.id, cast(stage_case(PortalOrder), Integer)).where(
            PortalOrder.customer_id == CUSTOMER
        )
    )
    got = {oid: LifecycleStage(int(n)) for oid, n in res.all()}
    assert got == expected


@pytest.mark.asyncio
async def test_completed_predicate_and_totals_query(session: AsyncSession):
    expected = await _seed(session)
    n_done = sum(1 for st in expected.values() if st is LifecycleStage.DELIVERED)

    res = await session.execute(
        select(PortalOrder.id).where(completed_predicate(PortalOrder))
    )
    assert len(res.scalars().all()) == n_done

    where = (PortalOrder.customer_id == CUSTOMER,)
    totals = (await session.execute(build_totals_query(PortalOrder, *where))).mappings().one()
    assert int(totals["total"]) == len(expected)
    assert int(totals["completed"]) == n_done
    assert int(totals["in_progress"]) == len(expected) - n_done
    assert int(totals["in_progress"]) + int(totals["completed"]) == int(totals["total"])

    by_stage = (await session.execute(build_by_stage_query(PortalOrder, *where))).mappings().all()
    got = {LifecycleStage(int(r["stage_no"])): int(r["n"]) for r in by_stage}
    want = Counter(expected.values())
    assert got == dict(want)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "raw",
    [None, "", " \t\r\n", "\tdelivered", "delivered\n", "NOT_ARRIVED", "DEL\u0130VERED", "已签收 "],
)
async def test_normalized_column_matches_python(session: AsyncSession, raw):
    res = await session.execute(select(normalized_column(literal(raw))))
    assert res.scalar_one() == normalize_raw_status(raw)


def test_normalized_column_on_postgresql_is_ascii_only():
    """PG 的 LOWER 按 locale 折叠 Unicode，这里必须编译成 BTRIM + TRANSLATE。"""
    sql = str(
        normalized_column(PortalOrder.delivery_status).compile(
            dialect=postgresql.dialect(), compile_kwargs={"literal_binds": True}
        )
    )
    assert "btrim(" in sql
    assert "translate(" in sql
    assert "lower(" not in sql.lower()
    assert "ABCDEFGHIJKLMNOPQRSTUVWXYZ" in sql


def test_normalized_column_on_sqlite_trims_all_whitespace():
    sql = str(
        normalized_column(PortalOrder.delivery_status).compile(
            dialect=sqlite.dialect(), compile_kwargs={"literal_binds": True}
        )
    )
    assert "trim(" in sql
    assert "\t" in sql and "\n" in sql
    assert "lower(" in sql
