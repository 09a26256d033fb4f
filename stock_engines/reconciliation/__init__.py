"""
Reconciliation - Pure ledger aggregation, integrity scans and snapshot
comparison for product stock.

Pipeline: expand movements to contribution events -> group and sum by
(location, batch) -> compare against the snapshot.  The report service in
stock_services composes these with the ports.
"""

from stock_kernel.logging_config import get_logger

logger = get_logger("engines.reconciliation")

from stock_engines.reconciliation.recon_types import (
    CheckSeverity,
    ContributionEvent,
    IntegrityCheckResult,
    IntegrityFinding,
    LedgerAggregate,
    MovementStats,
    ReconciliationResult,
    ReconciliationRow,
    SnapshotTotals,
)

from stock_engines.reconciliation.ledger import (
    LedgerAccumulator,
    LedgerAggregator,
    expand_movement,
)

from stock_engines.reconciliation.integrity import (
    INVALID_TRANSFER_MOVES,
    MOVEMENTS_WITHOUT_LINES,
    MOVEMENTS_WITHOUT_LOCATION,
    IntegrityChecker,
)

from stock_engines.reconciliation.comparison import (
    SNAPSHOT_MISSING_NOTE,
    ReconciliationEngine,
)

from stock_engines.reconciliation.stats import summarize_movement_types

__all__ = [
    "CheckSeverity",
    "ContributionEvent",
    "INVALID_TRANSFER_MOVES",
    "IntegrityCheckResult",
    "IntegrityChecker",
    "IntegrityFinding",
    "LedgerAccumulator",
    "LedgerAggregate",
    "LedgerAggregator",
    "MOVEMENTS_WITHOUT_LINES",
    "MOVEMENTS_WITHOUT_LOCATION",
    "MovementStats",
    "ReconciliationEngine",
    "ReconciliationResult",
    "ReconciliationRow",
    "SNAPSHOT_MISSING_NOTE",
    "SnapshotTotals",
    "expand_movement",
    "summarize_movement_types",
]
