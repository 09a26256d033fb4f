"""
Module: stock_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the canonical import surface for
    stock_services.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import stock_kernel domain types, exceptions and logging
    (and sibling engine modules).
    MUST NOT import stock_services.

Invariants enforced:
    - Purity: engines never read the clock or touch the database.
    - Decimal-only arithmetic for every quantity.
    - Determinism: identical inputs always produce identical outputs,
      whatever the input order.

Audit relevance:
    Every engine invocation is traced via the ``@traced_engine`` decorator
    (see ``stock_engines.tracer``), emitting STOCK_ENGINE_TRACE log records
    that include engine name, version, input fingerprint, and duration.

Usage:
    from stock_engines import LedgerAggregator, ReconciliationEngine

    expected = LedgerAggregator().aggregate(movements=movements)
    result = ReconciliationEngine().compare(expected=expected, snapshot=snapshot)
"""

from stock_kernel.logging_config import get_logger

logger = get_logger("engines")

from stock_engines.reconciliation import (
    INVALID_TRANSFER_MOVES,
    MOVEMENTS_WITHOUT_LINES,
    MOVEMENTS_WITHOUT_LOCATION,
    SNAPSHOT_MISSING_NOTE,
    CheckSeverity,
    ContributionEvent,
    IntegrityChecker,
    IntegrityCheckResult,
    IntegrityFinding,
    LedgerAccumulator,
    LedgerAggregate,
    LedgerAggregator,
    MovementStats,
    ReconciliationEngine,
    ReconciliationResult,
    ReconciliationRow,
    SnapshotTotals,
    expand_movement,
    summarize_movement_types,
)
from stock_engines.tracer import compute_input_fingerprint, traced_engine

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
    "compute_input_fingerprint",
    "expand_movement",
    "summarize_movement_types",
    "traced_engine",
]
