# app/services/order_progress.py
from __future__ import annotations

from typing import Any, List, Optional, Tuple

from app.models.enums import CustomsStatus, DeliveryStatus, DocSwapStatus, OverallStatus, ShipStatus
from app.services.order_lifecycle_types import ProgressStep, ProgressView, StepKey


def _get(record: Any, name: str) -> Any:
    return getattr(record, name, None)


# 固定 6 个节点（顺序即时间线顺序）
STEP_KEYS: Tuple[StepKey, ...] = ("accepted", "shipped", "arrived", "doc_swap", "customs", "delivered")


def project(record: Any) -> List[ProgressStep]:
    """
    订单 → 固定 6 个运输进度节点：
    accepted / shipped / arrived / doc_swap / customs / delivered

    每个节点只看自己的证据，与 classify 的优先级无关：
    已送达的订单 6 个节点全部打勾（只要各自证据都在）。
    """
    ship = ShipStatus.parse(_get(record, "ship_status"))
    customs = CustomsStatus.parse(_get(record, "customs_status"))
    delivery = DeliveryStatus.parse(_get(record, "delivery_status"))
    doc_swap = DocSwapStatus.parse(_get(record, "doc_swap_status"))
    overall = OverallStatus.parse(_get(record, "overall_status"))

    etd = _get(record, "etd")
    ata = _get(record, "ata")

    delivered = delivery is DeliveryStatus.DELIVERED or overall is OverallStatus.COMPLETED

    return [
        ProgressStep("accepted", "已接单", True, _get(record, "created_at")),
        ProgressStep("shipped", "已发运", etd is not None, etd),
        ProgressStep("arrived", "已到港", ship is ShipStatus.ARRIVED or ata is not None, ata),
        ProgressStep(
            "doc_swap",
            "已换单",
            doc_swap is DocSwapStatus.COMPLETED,
            _get(record, "doc_swap_time"),
        ),
        ProgressStep(
            "customs",
            "清关放行",
            customs is CustomsStatus.RELEASED,
            _get(record, "customs_release_time"),
        ),
        ProgressStep(
            "delivered",
            "已送达",
            delivered,
            _get(record, "updated_at") if delivered else None,
        ),
    ]


def current_step(steps: List[ProgressStep]) -> Optional[StepKey]:
    """第一个未完成的节点；全部完成时没有“当前”节点。"""
    for st in steps:
        if not st.completed:
            return st.key
    return None


def project_view(record: Any) -> ProgressView:
    steps = project(record)
    return ProgressView(
        steps=steps,
        current_step=current_step(steps),
        completed_count=sum(1 for st in steps if st.completed),
        total_steps=len(steps),
    )


def empty_view() -> ProgressView:
    """读库不可达时的详情 / 跟踪占位：无节点、无当前节点，total_steps 仍是 6。"""
    return ProgressView(steps=[], current_step=None, completed_count=0, total_steps=len(STEP_KEYS))
