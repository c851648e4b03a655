# app/api/deps.py
from __future__ import annotations

from typing import AsyncGenerator, Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.problem import raise_problem
from app.db.session import get_session as _get_session
from app.obs.observer import PortalObserver, get_observer
from app.services.order_portal_service import OrderPortalService


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI 依赖友好的包装：直接 yield AsyncSession（测试里 override 这一个即可）。
    """
    async for session in _get_session():
        yield session


# ---------------------------
# 客户身份（由网关 / 登录层注入，门户这里只读 header）
# ---------------------------


async def get_customer_id(
    x_portal_customer: Optional[str] = Header(
        None,
        alias="X-Portal-Customer",
        description="当前客户编号（认证层签发，门户只负责透传）",
    ),
) -> str:
    cid = (x_portal_customer or "").strip()
    if not cid:
        raise_problem("customer_required")
    return cid


async def get_order_portal_service(
    session: AsyncSession = Depends(get_session),
    observer: PortalObserver = Depends(get_observer),
) -> OrderPortalService:
    return OrderPortalService(session, observer)


__all__ = (
    "get_session",
    "get_customer_id",
    "get_order_portal_service",
)
