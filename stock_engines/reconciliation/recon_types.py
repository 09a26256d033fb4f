"""
Ledger reconciliation domain types.

Pure frozen dataclasses and enums produced by the ledger aggregator, the
integrity checker and the reconciliation engine, and consumed by the
report assembler.

Architecture: stock_engines/reconciliation -- pure domain, zero I/O.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from decimal import Decimal
from enum import Enum
from types import MappingProxyType

from stock_kernel.domain.balances import BalanceKey
from stock_kernel.domain.quantities import ZERO


# =============================================================================
# Enums
# =============================================================================


class CheckSeverity(str, Enum):
    """Severity level of an integrity finding."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


# =============================================================================
# Ledger aggregation
# =============================================================================


@dataclass(frozen=True)
class ContributionEvent:
    """One signed quantity landing on one (location, batch) key."""

    movement_id: int
    location_id: int | None
    batch_id: int | None
    quantity: Decimal

    @property
    def key(self) -> BalanceKey:
        return BalanceKey(self.location_id, self.batch_id)


@dataclass(frozen=True)
class LedgerAggregate:
    """Expected balances derived from the ledger, rounded to 4 places.

    Both mappings are read-only and iterate in a deterministic key order
    (``None`` first, then ascending ids), independent of input order.
    """

    by_location: Mapping[int | None, Decimal] = field(
        default_factory=lambda: MappingProxyType({})
    )
    by_location_batch: Mapping[BalanceKey, Decimal] = field(
        default_factory=lambda: MappingProxyType({})
    )
    movement_count: int = 0
    batch_codes: Mapping[int, str] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @property
    def is_empty(self) -> bool:
        return not self.by_location_batch

    @property
    def total(self) -> Decimal:
        return sum(self.by_location.values(), ZERO)


# =============================================================================
# Integrity checks
# =============================================================================


@dataclass(frozen=True)
class IntegrityFinding:
    """One structural problem found in the ledger.

    ``message`` is used verbatim as a report note.
    """

    code: str
    severity: CheckSeverity
    message: str
    count: int = 0
    movement_ids: tuple[int, ...] = ()


@dataclass(frozen=True)
class IntegrityCheckResult:
    """Outcome of all integrity scans over one movement set."""

    movements_checked: int = 0
    movements_without_lines: int = 0
    invalid_transfer_moves: int = 0
    movements_without_location: int = 0
    findings: tuple[IntegrityFinding, ...] = ()

    @property
    def is_clean(self) -> bool:
        return len(self.findings) == 0

    @property
    def error_count(self) -> int:
        return sum(1 for f in self.findings if f.severity == CheckSeverity.ERROR)

    @property
    def notes(self) -> tuple[str, ...]:
        return tuple(f.message for f in self.findings)


# =============================================================================
# Snapshot comparison
# =============================================================================


@dataclass(frozen=True)
class ReconciliationRow:
    """Expected-vs-snapshot comparison for one key.

    Location-level rows have ``batch_id=None`` and ``batch_code=None``.
    """

    location_id: int | None
    expected_from_ledger: Decimal
    snapshot_qty: Decimal
    delta: Decimal
    batch_id: int | None = None
    batch_code: str | None = None

    @property
    def key(self) -> BalanceKey:
        return BalanceKey(self.location_id, self.batch_id)

    @property
    def has_drift(self) -> bool:
        return self.delta != ZERO


@dataclass(frozen=True)
class ReconciliationResult:
    """Per-key deltas between the ledger and the snapshot."""

    compare_by_location: tuple[ReconciliationRow, ...] = ()
    compare_by_location_batch: tuple[ReconciliationRow, ...] = ()
    snapshot_missing: bool = False
    notes: tuple[str, ...] = ()

    @property
    def drift_rows(self) -> tuple[ReconciliationRow, ...]:
        return tuple(
            row
            for row in self.compare_by_location + self.compare_by_location_batch
            if row.has_drift
        )

    @property
    def has_drift(self) -> bool:
        return len(self.drift_rows) > 0


@dataclass(frozen=True)
class SnapshotTotals:
    """Consistency of the snapshot's own total against its location rows."""

    qty_on_hand: Decimal
    qty_on_hand_computed_from_by_location: Decimal
    mismatch: Decimal = ZERO
    is_consistent: bool = True

    @property
    def note(self) -> str | None:
        if self.is_consistent:
            return None
        return (
            f"Totals mismatch: totalQty={self.qty_on_hand} "
            f"vs sum(byLocation)={self.qty_on_hand_computed_from_by_location}"
        )


# =============================================================================
# Movement statistics
# =============================================================================


@dataclass(frozen=True)
class MovementStats:
    """Movement counts by normalized type label."""

    total_movements: int = 0
    rendered_movements: int = 0
    types: Mapping[str, int] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def with_rendered(self, rendered: int) -> MovementStats:
        return replace(self, rendered_movements=rendered)
