# app/obs/observer.py
from __future__ import annotations

import logging
from typing import Any, Iterable, Optional, Tuple

from app.obs.metrics import (
    portal_activity_total,
    portal_malformed_records_total,
    portal_store_degraded_total,
    portal_unrecognized_status_total,
)
from app.services.order_lifecycle_types import MalformedRecord


class PortalObserver:
    """
    门户统一观测入口（注入到服务层，替代散落各处的 console 打点）：

    - store_unavailable : 读库失败 → 降级，记 warning + 计数
    - unrecognized      : 上游新增状态字，记 info + 按字段计数
    - malformed         : 缺身份字段的脏数据
    - activity          : 客户行为（view_orders / view_order_detail / ...）
    """

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.log = logger or logging.getLogger("portal.orders")

    def store_unavailable(self, op: str, exc: BaseException) -> None:
        portal_store_degraded_total.labels(op).inc()
        self.log.warning("STORE_DEGRADED op=%s err=%s", op, exc)

    def unrecognized(self, pairs: Iterable[Tuple[str, str]]) -> None:
        for field, raw in pairs:
            portal_unrecognized_status_total.labels(field).inc()
            self.log.info("UNRECOGNIZED_STATUS field=%s raw=%r", field, raw)

    def malformed(self, err: MalformedRecord) -> None:
        portal_malformed_records_total.inc()
        self.log.warning("MALFORMED_RECORD %s", err)

    def activity(self, customer_id: str, action: str, **details: Any) -> None:
        portal_activity_total.labels(action).inc()
        self.log.info("ACTIVITY customer=%s action=%s details=%s", customer_id, action, details)


_default_observer = PortalObserver()


def get_observer() -> PortalObserver:
    """FastAPI 依赖：进程级单例（无状态，只持有 logger）。"""
    return _default_observer
