"""
Module: stock_kernel.models.product
Responsibility: ORM mapping for the product and batch master data the report
    reads.  Only the columns the reconciliation report needs are mapped.
Architecture position: Kernel > Models.  May import from db/base.py only.
"""

from __future__ import annotations

from sqlalchemy import Boolean, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from stock_kernel.db.base import Base


class ProductModel(Base):
    """
    Product header.

    Contract:
        ``batch_tracking_enabled`` decides whether header-only movements are
        flagged by the integrity checks.
    """

    __tablename__ = "products"

    sku: Mapped[str | None] = mapped_column(String(100), nullable=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    stock_tracking_enabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    batch_tracking_enabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )


class BatchModel(Base):
    """
    Stock batch (lot) of a product.

    The display code is the first non-empty of ``code_sartor``,
    ``code_mill`` and ``name``.
    """

    __tablename__ = "batches"

    __table_args__ = (
        Index("idx_batch_product", "product_id"),
    )

    product_id: Mapped[int | None] = mapped_column(
        ForeignKey("products.id"), nullable=True
    )
    code_mill: Mapped[str | None] = mapped_column(String(100), nullable=True)
    code_sartor: Mapped[str | None] = mapped_column(String(100), nullable=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    @property
    def display_code(self) -> str | None:
        return self.code_sartor or self.code_mill or self.name or None
