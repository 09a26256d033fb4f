"""
Pure domain layer of the stock kernel: value objects, ports, time.

Nothing in this package performs I/O except ``SystemClock``.
"""

from stock_kernel.domain.balances import (
    BalanceKey,
    SnapshotBatchRow,
    SnapshotLocationRow,
    StockSnapshot,
    location_sort_key,
)
from stock_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from stock_kernel.domain.deadline import Deadline
from stock_kernel.domain.movement import (
    TRANSFER_LIKE_TYPES,
    Movement,
    MovementLine,
    MovementType,
    ReasonKind,
    ReasonRef,
    is_transfer_like,
    normalize_type_label,
)
from stock_kernel.domain.ports import (
    MovementOrder,
    MovementPage,
    MovementStore,
    ProductCatalog,
    SnapshotProvider,
)
from stock_kernel.domain.product import ProductInfo
from stock_kernel.domain.quantities import (
    QUANTITY_DECIMAL_PLACES,
    ZERO,
    coerce_id,
    coerce_quantity,
    round_qty,
)

__all__ = [
    "BalanceKey",
    "Clock",
    "Deadline",
    "DeterministicClock",
    "Movement",
    "MovementLine",
    "MovementOrder",
    "MovementPage",
    "MovementStore",
    "MovementType",
    "ProductCatalog",
    "ProductInfo",
    "QUANTITY_DECIMAL_PLACES",
    "ReasonKind",
    "ReasonRef",
    "SnapshotBatchRow",
    "SnapshotLocationRow",
    "SnapshotProvider",
    "StockSnapshot",
    "SystemClock",
    "TRANSFER_LIKE_TYPES",
    "ZERO",
    "coerce_id",
    "coerce_quantity",
    "is_transfer_like",
    "location_sort_key",
    "normalize_type_label",
    "round_qty",
]
