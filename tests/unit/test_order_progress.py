from datetime import datetime, timezone

from app.services.order_classifier import classify
from app.services.order_lifecycle_types import LifecycleStage
from app.services.order_progress import current_step, project, project_view
from tests.helpers.orders import make_record

UTC = timezone.utc
T0 = datetime(2026, 3, 1, 8, 0, tzinfo=UTC)


def _keys(steps):
    return [s.key for s in steps]


def test_project_always_six_steps_in_order():
    steps = project(make_record())
    assert _keys(steps) == ["accepted", "shipped", "arrived", "doc_swap", "customs", "delivered"]
    assert [s.label for s in steps] == ["已接单", "已发运", "已到港", "已换单", "清关放行", "已送达"]


def test_bare_record_only_accepted():
    view = project_view(make_record(created_at=T0))
    assert view.completed_count == 1
    assert view.total_steps == 6
    assert view.current_step == "shipped"
    assert view.steps[0].occurred_at == T0


def test_each_step_uses_its_own_evidence():
    etd = datetime(2026, 3, 2, tzinfo=UTC)
    ata = datetime(2026, 3, 20, tzinfo=UTC)
    steps = project(make_record(etd=etd, ata=ata))
    by_key = {s.key: s for s in steps}
    assert by_key["shipped"].completed and by_key["shipped"].occurred_at == etd
    assert by_key["arrived"].completed and by_key["arrived"].occurred_at == ata
    assert not by_key["doc_swap"].completed
    assert not by_key["customs"].completed


def test_arrived_by_ship_status_without_ata():
    by_key = {s.key: s for s in project(make_record(ship_status="已到港"))}
    assert by_key["arrived"].completed
    assert by_key["arrived"].occurred_at is None


def test_steps_not_forced_monotone():
    # 清关放行但没有 etd：shipped 仍未完成，current_step 指向它
    rec = make_record(customs_status="released", doc_swap_status="completed")
    view = project_view(rec)
    by_key = {s.key: s for s in view.steps}
    assert by_key["customs"].completed
    assert by_key["doc_swap"].completed
    assert not by_key["shipped"].completed
    assert view.current_step == "shipped"


def test_delivered_step_via_overall_completed_uses_updated_at():
    upd = datetime(2026, 4, 1, tzinfo=UTC)
    by_key = {s.key: s for s in project(make_record(overall_status="已完成", updated_at=upd))}
    assert by_key["delivered"].completed
    assert by_key["delivered"].occurred_at == upd


def test_delivered_step_without_evidence_has_no_time():
    upd = datetime(2026, 4, 1, tzinfo=UTC)
    by_key = {s.key: s for s in project(make_record(updated_at=upd))}
    assert not by_key["delivered"].completed
    assert by_key["delivered"].occurred_at is None


def test_delivered_step_implies_delivered_stage():
    for rec in (
        make_record(delivery_status="delivered", customs_status="in customs"),
        make_record(overall_status="completed", delivery_status="dispatching"),
    ):
        steps = {s.key: s for s in project(rec)}
        assert steps["delivered"].completed
        assert classify(rec) is LifecycleStage.DELIVERED


def test_fully_delivered_order_all_steps_complete():
    rec = make_record(
        created_at=T0,
        etd=T0,
        ata=T0,
        ship_status="arrived",
        doc_swap_status="换单完成",
        customs_status="cleared",
        delivery_status="delivered",
        updated_at=T0,
    )
    view = project_view(rec)
    assert view.completed_count == view.total_steps == 6
    assert view.current_step is None
    assert current_step(view.steps) is None


def test_unrecognized_values_do_not_complete_steps():
    rec = make_record(ship_status="berthing", doc_swap_status="??", customs_status="held")
    assert project_view(rec).completed_count == 1
