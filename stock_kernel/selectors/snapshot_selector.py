"""
Module: stock_kernel.selectors.snapshot_selector
Responsibility: Read-only access to the materialized stock snapshot.
    Implements the SnapshotProvider port.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - A product with no snapshot rows is reported as unavailable (None), which
      the reconciliation engine treats the same as an empty snapshot.
    - Location rows are de-duplicated from the denormalized batch rows; the
      first row seen for a location supplies its ``location_qty``.
"""

from __future__ import annotations

from sqlalchemy import select

from stock_kernel.domain.balances import (
    SnapshotBatchRow,
    SnapshotLocationRow,
    StockSnapshot,
)
from stock_kernel.domain.quantities import coerce_id, coerce_quantity
from stock_kernel.logging_config import get_logger
from stock_kernel.models.stock_snapshot import ProductStockSnapshotModel
from stock_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.snapshot")


class SnapshotSelector(BaseSelector):
    """Selector for the cached product stock snapshot."""

    def get(self, product_id: int) -> StockSnapshot | None:
        stmt = (
            select(ProductStockSnapshotModel)
            .where(ProductStockSnapshotModel.product_id == product_id)
            .order_by(ProductStockSnapshotModel.id)
        )
        rows = self.session.scalars(stmt).all()
        if not rows:
            logger.info("snapshot_unavailable", extra={"product_id": product_id})
            return None

        locations: dict[int | None, SnapshotLocationRow] = {}
        batches: list[SnapshotBatchRow] = []
        for row in rows:
            location_id = coerce_id(row.location_id)
            if location_id not in locations:
                locations[location_id] = SnapshotLocationRow(
                    location_id=location_id,
                    qty=coerce_quantity(row.location_qty),
                    location_name=row.location_name,
                )
            batches.append(SnapshotBatchRow(
                location_id=location_id,
                batch_id=coerce_id(row.batch_id),
                qty=coerce_quantity(row.batch_qty),
                batch_code=row.batch_code,
            ))

        return StockSnapshot(
            product_id=product_id,
            total=coerce_quantity(rows[0].total_qty),
            by_location=tuple(locations.values()),
            by_location_batch=tuple(batches),
        )
