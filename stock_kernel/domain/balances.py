"""
Balance keys and snapshot value objects.

Responsibility:
    The composite (location, batch) key shared by the ledger aggregation and
    the snapshot comparison, and the frozen shape of the externally computed
    balance snapshot.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - ``BalanceKey`` is a hashable tuple; ``None`` on either side is an
      explicit "no location" / "no batch" key, never an error.
    - Snapshot rows are read-only; the reconciliation engine never writes
      them back.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import NamedTuple

from stock_kernel.domain.quantities import ZERO


class BalanceKey(NamedTuple):
    """(location, batch) grouping key."""

    location_id: int | None
    batch_id: int | None

    def sort_key(self) -> tuple:
        """Deterministic ordering with ``None`` sorted first."""
        return (
            self.location_id is not None,
            self.location_id or 0,
            self.batch_id is not None,
            self.batch_id or 0,
        )


def location_sort_key(location_id: int | None) -> tuple:
    """Deterministic ordering for nullable location ids."""
    return (location_id is not None, location_id or 0)


@dataclass(frozen=True)
class SnapshotLocationRow:
    """Snapshot balance for one location."""

    location_id: int | None
    qty: Decimal = ZERO
    location_name: str | None = None


@dataclass(frozen=True)
class SnapshotBatchRow:
    """Snapshot balance for one (location, batch) pair."""

    location_id: int | None
    batch_id: int | None
    qty: Decimal = ZERO
    batch_code: str | None = None

    @property
    def key(self) -> BalanceKey:
        return BalanceKey(self.location_id, self.batch_id)


@dataclass(frozen=True)
class StockSnapshot:
    """Cached current balance view for one product.

    Independently computed and possibly stale relative to the ledger.
    """

    product_id: int
    total: Decimal = ZERO
    by_location: tuple[SnapshotLocationRow, ...] = ()
    by_location_batch: tuple[SnapshotBatchRow, ...] = ()

    @property
    def is_empty(self) -> bool:
        """True when neither view has any rows."""
        return not self.by_location and not self.by_location_batch

    def batches_at(self, location_id: int | None) -> tuple[SnapshotBatchRow, ...]:
        """Batch rows belonging to one location."""
        return tuple(
            row for row in self.by_location_batch
            if row.location_id == location_id
        )
