"""
Module: stock_kernel.models.stock_snapshot
Responsibility: ORM mapping for the materialized product stock snapshot.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - Maintained by an external refresh process.  The report only reads it
      and never assumes it is consistent with the movement ledger.
    - One row per (product, location, batch).  ``location_qty`` and
      ``total_qty`` repeat the location and product totals on every row,
      the way the materialized view denormalizes them.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from stock_kernel.db.base import Base


class ProductStockSnapshotModel(Base):
    """Cached balance row for one (product, location, batch)."""

    __tablename__ = "product_stock_snapshot"

    __table_args__ = (
        Index("idx_stock_snapshot_product", "product_id"),
    )

    product_id: Mapped[int] = mapped_column(nullable=False)
    location_id: Mapped[int | None] = mapped_column(nullable=True)
    location_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    batch_id: Mapped[int | None] = mapped_column(nullable=True)
    batch_code: Mapped[str | None] = mapped_column(String(100), nullable=True)
    batch_qty: Mapped[Decimal | None] = mapped_column(Numeric(38, 9), nullable=True)
    location_qty: Mapped[Decimal | None] = mapped_column(Numeric(38, 9), nullable=True)
    total_qty: Mapped[Decimal | None] = mapped_column(Numeric(38, 9), nullable=True)
