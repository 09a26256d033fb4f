"""
Module: stock_kernel.models.movement
Responsibility: ORM mapping for the append-only product movement ledger and
    its batch-level lines.
Architecture position: Kernel > Models.  May import from db/base.py and
    sibling models only.

Invariants enforced:
    - Append-only: the report never updates or deletes these rows.
    - Movement ids are monotonic and serve as the descending paging cursor
      (idx_movement_product_id).

Non-goals:
    - Quantity, type and location columns are nullable because the ledger
      holds legacy data; coercion happens when rows become domain objects.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import ForeignKey, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stock_kernel.db.base import Base
from stock_kernel.models.product import BatchModel


class ProductMovementModel(Base):
    """
    One ledger entry for a product.

    Contract:
        At most one reason id is expected to be set; when several are, the
        domain layer resolves them by precedence.  ``quantity`` is only used
        when the movement has no lines.
    """

    __tablename__ = "product_movements"

    __table_args__ = (
        # Query: page through a product's ledger by descending id
        Index("idx_movement_product_id", "product_id", "id"),
        # Query: ledger listing ordered by date
        Index("idx_movement_product_date", "product_id", "date"),
    )

    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id"), nullable=False
    )
    movement_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    date: Mapped[datetime | None] = mapped_column(nullable=True)
    location_in_id: Mapped[int | None] = mapped_column(nullable=True)
    location_out_id: Mapped[int | None] = mapped_column(nullable=True)
    quantity: Mapped[Decimal | None] = mapped_column(Numeric(38, 9), nullable=True)

    assembly_activity_id: Mapped[int | None] = mapped_column(nullable=True)
    assembly_id: Mapped[int | None] = mapped_column(nullable=True)
    job_id: Mapped[int | None] = mapped_column(nullable=True)
    purchase_order_line_id: Mapped[int | None] = mapped_column(nullable=True)
    shipping_line_id: Mapped[int | None] = mapped_column(nullable=True)
    expense_id: Mapped[int | None] = mapped_column(nullable=True)
    costing_id: Mapped[int | None] = mapped_column(nullable=True)

    created_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    lines: Mapped[list[ProductMovementLineModel]] = relationship(
        back_populates="movement",
        order_by="ProductMovementLineModel.id",
    )


class ProductMovementLineModel(Base):
    """
    Batch-level line of a movement.

    ``batch_id`` NULL means untracked stock.
    """

    __tablename__ = "product_movement_lines"

    __table_args__ = (
        Index("idx_movement_line_movement", "movement_id"),
    )

    movement_id: Mapped[int] = mapped_column(
        ForeignKey("product_movements.id"), nullable=False
    )
    batch_id: Mapped[int | None] = mapped_column(
        ForeignKey("batches.id"), nullable=True
    )
    quantity: Mapped[Decimal | None] = mapped_column(Numeric(38, 9), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    movement: Mapped[ProductMovementModel] = relationship(back_populates="lines")
    batch: Mapped[BatchModel | None] = relationship()
