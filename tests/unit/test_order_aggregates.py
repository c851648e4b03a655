from decimal import Decimal

from app.services.order_aggregates import count_records, counts_from_rows, to_decimal
from app.services.order_lifecycle_types import LifecycleStage
from tests.helpers.orders import make_record


def test_to_decimal():
    assert to_decimal(None) == Decimal("0")
    assert to_decimal(0.1) == Decimal("0.1")
    assert to_decimal(Decimal("2.5")) == Decimal("2.5")
    assert to_decimal(3) == Decimal("3")


def test_count_records_empty():
    out = count_records([])
    assert out.total == out.in_progress == out.completed == 0
    assert out.total_weight == Decimal("0")
    assert set(out.by_stage) == set(LifecycleStage)
    assert all(n == 0 for n in out.by_stage.values())


def test_scenario_d_three_orders():
    recs = [
        make_record(delivery_status="delivered", weight=Decimal("100"), volume=Decimal("1.5")),
        make_record(customs_status="in customs", weight=Decimal("50")),
        make_record(ship_status="not arrived", volume=Decimal("2")),
    ]
    out = count_records(recs)
    assert out.total == 3
    assert out.completed == 1
    assert out.in_progress == 2
    assert out.total_weight == Decimal("150")
    assert out.total_volume == Decimal("3.5")
    assert out.by_stage[LifecycleStage.DELIVERED] == 1
    assert out.by_stage[LifecycleStage.CUSTOMS_IN_PROGRESS] == 1
    assert out.by_stage[LifecycleStage.NOT_ARRIVED] == 1


def test_archived_and_cancelled_count_as_completed():
    recs = [
        make_record(overall_status="archived"),
        make_record(overall_status="已取消"),
        make_record(overall_status="rejected"),
    ]
    out = count_records(recs)
    assert out.completed == 2
    assert out.in_progress == 1


def test_total_invariant_and_by_stage_sum():
    recs = [
        make_record(overall_status=o, delivery_status=d, customs_status=c)
        for o in (None, "completed", "pending")
        for d in (None, "delivered", "dispatching", "lost")
        for c in (None, "released", "inspection")
    ]
    out = count_records(recs)
    assert out.total == out.in_progress + out.completed == len(recs)
    assert sum(out.by_stage.values()) == out.total
    assert out.by_stage[LifecycleStage.DELIVERED] == out.completed


def test_counts_from_rows():
    out = counts_from_rows(
        {"total": 3, "in_progress": 2, "completed": 1, "total_weight": None, "total_volume": 4.5},
        [{"stage_no": 5, "n": 1}, {"stage_no": 0, "n": 2}],
    )
    assert out.total == 3
    assert out.total_weight == Decimal("0")
    assert out.total_volume == Decimal("4.5")
    assert out.by_stage[LifecycleStage.DELIVERED] == 1
    assert out.by_stage[LifecycleStage.NOT_ARRIVED] == 2
    assert out.by_stage[LifecycleStage.ARRIVED] == 0
