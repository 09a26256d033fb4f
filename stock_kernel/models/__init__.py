"""ORM models for the stock kernel persistence adapters."""

from stock_kernel.models.movement import ProductMovementLineModel, ProductMovementModel
from stock_kernel.models.product import BatchModel, ProductModel
from stock_kernel.models.stock_snapshot import ProductStockSnapshotModel

__all__ = [
    "BatchModel",
    "ProductModel",
    "ProductMovementLineModel",
    "ProductMovementModel",
    "ProductStockSnapshotModel",
]
