"""Selectors for the stock kernel (read side)."""

from stock_kernel.selectors.movement_selector import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    MIN_PAGE_SIZE,
    MovementSelector,
    ProductSelector,
    clamp_page_size,
    movement_from_row,
)
from stock_kernel.selectors.snapshot_selector import SnapshotSelector

__all__ = [
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "MIN_PAGE_SIZE",
    "MovementSelector",
    "ProductSelector",
    "SnapshotSelector",
    "clamp_page_size",
    "movement_from_row",
]
