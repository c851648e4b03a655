# app/db/base.py
from __future__ import annotations

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """全局唯一 ORM Base"""

    pass


def init_models() -> None:
    """集中导入模型，保证 Base.metadata 完整（Alembic / 测试建表前调用）。"""
    import app.models.portal_order  # noqa: F401
