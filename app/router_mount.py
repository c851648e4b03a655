# app/router_mount.py
from __future__ import annotations

from fastapi import FastAPI


def mount_routers(app: FastAPI) -> None:
    from app.api.routers.orders import router as orders_router
    from app.api.routers.orders_stats import router as orders_stats_router
    from app.obs.metrics import metrics_router

    # 统计先挂：/api/orders/stats/* 优先于 /api/orders/{order_id}
    app.include_router(orders_stats_router)
    app.include_router(orders_router)
    app.include_router(metrics_router)
