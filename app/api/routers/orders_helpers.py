# app/api/routers/orders_helpers.py
from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

from app.api.routers.orders_schemas import (
    OrderDetailModel,
    OrderRowModel,
    OrderTrackingModel,
    ProgressStepModel,
)
from app.services.order_aggregates import to_decimal
from app.services.order_lifecycle_types import ProgressView
from app.services.order_portal_service import OrderDetail, OrderRow

# 读库不可达时各页面统一的提示文案
SYNCING_MESSAGE = "数据正在同步中"


def _row_fields(row: OrderRow) -> Dict[str, Any]:
    rec = row.record
    return {
        "id": rec.id,
        "order_number": rec.order_number,
        "bill_number": rec.bill_number,
        "container_number": rec.container_number,
        **row.display,
        "raw_status": rec.overall_status,
        "ship_status": rec.ship_status,
        "customs_status": rec.customs_status,
        "delivery_status": rec.delivery_status,
        "doc_swap_status": rec.doc_swap_status,
        "etd": rec.etd,
        "eta": rec.eta,
        "ata": rec.ata,
        "created_at": rec.created_at,
        "updated_at": rec.updated_at,
        "weight": float(to_decimal(rec.weight)),
        "volume": float(to_decimal(rec.volume)),
        "pieces": rec.pieces,
    }


def to_row_model(row: OrderRow) -> OrderRowModel:
    return OrderRowModel(**_row_fields(row))


def _progress_fields(view: ProgressView) -> Dict[str, Any]:
    return {
        "progress_steps": [ProgressStepModel(**asdict(st)) for st in view.steps],
        "current_step": view.current_step,
        "completed_count": view.completed_count,
        "total_steps": view.total_steps,
    }


def _degraded_fields(degraded: bool) -> Dict[str, Any]:
    return {"degraded": degraded, "message": SYNCING_MESSAGE if degraded else None}


def to_detail_model(detail: OrderDetail) -> OrderDetailModel:
    if detail.row is None:
        return OrderDetailModel(
            id=detail.order_id,
            **_progress_fields(detail.progress),
            **_degraded_fields(detail.degraded),
        )
    rec = detail.row.record
    return OrderDetailModel(
        **_row_fields(detail.row),
        doc_swap_time=rec.doc_swap_time,
        customs_release_time=rec.customs_release_time,
        **_progress_fields(detail.progress),
        **_degraded_fields(detail.degraded),
    )


def to_tracking_model(order_id: str, view: ProgressView, *, degraded: bool = False) -> OrderTrackingModel:
    return OrderTrackingModel(order_id=order_id, **_progress_fields(view), **_degraded_fields(degraded))
