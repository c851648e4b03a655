# app/api/routers/orders.py
from __future__ import annotations

from fastapi import APIRouter

from app.api.routers import orders_routes
from app.api.routers.orders_schemas import (
    OrderDetailModel,
    OrderListResponse,
    OrderRowModel,
    OrderTrackingModel,
)

router = APIRouter(
    prefix="/api/orders",
    tags=["orders"],
)


def _register_all_routes() -> None:
    orders_routes.register(router)


_register_all_routes()

__all__ = [
    "router",
    "OrderDetailModel",
    "OrderListResponse",
    "OrderRowModel",
    "OrderTrackingModel",
]
