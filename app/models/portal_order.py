# app/models/portal_order.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class PortalOrder(Base):
    """
    门户订单读模型（ERP 同步 / 下单流程写入，门户只读）
    - 状态字段保持 ERP 原始字符串（可能为 NULL / 空串 / 中文 / 新增未知值）
    - 时间列具时区；缺失 = 尚未发生
    """

    __tablename__ = "portal_orders"
    __table_args__ = (
        Index("ix_portal_orders_customer_created", "customer_id", "created_at"),
        Index("ix_portal_orders_customer_release", "customer_id", "customs_release_time"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    customer_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    order_number: Mapped[str | None] = mapped_column(String(64), nullable=True)
    bill_number: Mapped[str | None] = mapped_column(String(64), nullable=True)
    container_number: Mapped[str | None] = mapped_column(String(64), nullable=True)

    # 原始状态（松散字符串）
    overall_status: Mapped[str | None] = mapped_column(String(32), nullable=True)
    ship_status: Mapped[str | None] = mapped_column(String(32), nullable=True)
    customs_status: Mapped[str | None] = mapped_column(String(32), nullable=True)
    delivery_status: Mapped[str | None] = mapped_column(String(32), nullable=True)
    doc_swap_status: Mapped[str | None] = mapped_column(String(32), nullable=True)

    etd: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    eta: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    ata: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    doc_swap_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    customs_release_time: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    weight: Mapped[Decimal | None] = mapped_column(Numeric(14, 3), nullable=True)
    volume: Mapped[Decimal | None] = mapped_column(Numeric(14, 3), nullable=True)
    pieces: Mapped[int | None] = mapped_column(Integer, nullable=True)

    def __repr__(self) -> str:
        return f"<PortalOrder id={self.id!r} customer={self.customer_id!r} no={self.order_number!r}>"
