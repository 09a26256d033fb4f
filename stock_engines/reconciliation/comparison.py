"""
Module: stock_engines.reconciliation.comparison
Responsibility:
    Compare ledger-derived expected balances against the cached balance
    snapshot and report the per-key drift.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - ``delta = round4(snapshot_qty - expected_from_ledger)`` for every row.
    - Only keys present in the expected balances are compared; keys that
      exist only in the snapshot are not synthesized.
    - A missing or empty snapshot is compared as zero for every key and
      flagged ``snapshot_missing``; the report degrades to ledger totals.
    - Output row order follows the expected aggregate's key order, so
      identical inputs yield identical results.

Failure modes:
    - None raised for data problems.  The engine reports magnitude and
      direction only; it does not explain drift.
"""

from __future__ import annotations

from decimal import Decimal

from stock_kernel.domain.balances import BalanceKey, StockSnapshot
from stock_kernel.domain.quantities import QUANTITY_DECIMAL_PLACES, ZERO, round_qty
from stock_kernel.logging_config import get_logger
from stock_engines.tracer import traced_engine

from stock_engines.reconciliation.recon_types import (
    LedgerAggregate,
    ReconciliationResult,
    ReconciliationRow,
    SnapshotTotals,
)

logger = get_logger("engines.reconciliation.comparison")

SNAPSHOT_MISSING_NOTE = "No snapshot rows found; reconciliation against ledger only."


class ReconciliationEngine:
    """Pure engine for ledger-vs-snapshot comparison.

    Usage:
        engine = ReconciliationEngine()
        result = engine.compare(expected=aggregate, snapshot=snapshot)
        for row in result.drift_rows:
            ...
    """

    def __init__(
        self,
        decimal_places: int = QUANTITY_DECIMAL_PLACES,
        totals_tolerance: Decimal = ZERO,
    ):
        self._decimal_places = decimal_places
        self._totals_tolerance = totals_tolerance

    def _round(self, value: Decimal) -> Decimal:
        return round_qty(value, self._decimal_places)

    @traced_engine(
        "reconciliation_engine", "1.0",
        fingerprint_fields=("expected", "snapshot"),
    )
    def compare(
        self,
        expected: LedgerAggregate,
        snapshot: StockSnapshot | None,
    ) -> ReconciliationResult:
        snapshot_missing = snapshot is None or snapshot.is_empty

        snapshot_by_location: dict[int | None, Decimal] = {}
        snapshot_by_key: dict[BalanceKey, Decimal] = {}
        snapshot_codes: dict[int, str] = {}
        if not snapshot_missing:
            # Later rows win for a repeated key.
            for loc_row in snapshot.by_location:
                snapshot_by_location[loc_row.location_id] = loc_row.qty
            for batch_row in snapshot.by_location_batch:
                snapshot_by_key[batch_row.key] = batch_row.qty
                if batch_row.batch_id is not None and batch_row.batch_code:
                    snapshot_codes[batch_row.batch_id] = batch_row.batch_code

        by_location = tuple(
            self._row(
                location_id=location_id,
                batch_id=None,
                expected_qty=qty,
                snapshot_qty=snapshot_by_location.get(location_id, ZERO),
            )
            for location_id, qty in expected.by_location.items()
        )
        by_location_batch = tuple(
            self._row(
                location_id=key.location_id,
                batch_id=key.batch_id,
                expected_qty=qty,
                snapshot_qty=snapshot_by_key.get(key, ZERO),
                batch_code=(
                    expected.batch_codes.get(key.batch_id)
                    or snapshot_codes.get(key.batch_id)
                    if key.batch_id is not None else None
                ),
            )
            for key, qty in expected.by_location_batch.items()
        )

        notes = (SNAPSHOT_MISSING_NOTE,) if snapshot_missing else ()
        result = ReconciliationResult(
            compare_by_location=by_location,
            compare_by_location_batch=by_location_batch,
            snapshot_missing=snapshot_missing,
            notes=notes,
        )

        drift = result.drift_rows
        if drift:
            logger.info("reconciliation_drift_detected", extra={
                "drift_rows": len(drift),
                "snapshot_missing": snapshot_missing,
            })
        return result

    def _row(
        self,
        location_id: int | None,
        batch_id: int | None,
        expected_qty: Decimal,
        snapshot_qty: Decimal,
        batch_code: str | None = None,
    ) -> ReconciliationRow:
        return ReconciliationRow(
            location_id=location_id,
            batch_id=batch_id,
            batch_code=batch_code,
            expected_from_ledger=expected_qty,
            snapshot_qty=snapshot_qty,
            delta=self._round(snapshot_qty - expected_qty),
        )

    def check_snapshot_totals(self, snapshot: StockSnapshot | None) -> SnapshotTotals:
        """Compare the snapshot's own total with the sum of its location rows.

        Both sides are rounded before comparison; a difference larger than
        the configured tolerance is a mismatch.  A missing snapshot has
        zero totals and is consistent.
        """
        if snapshot is None:
            return SnapshotTotals(qty_on_hand=self._round(ZERO),
                                  qty_on_hand_computed_from_by_location=self._round(ZERO))

        qty_on_hand = self._round(snapshot.total)
        computed = self._round(sum((row.qty for row in snapshot.by_location), ZERO))
        mismatch = self._round(qty_on_hand - computed)
        consistent = abs(mismatch) <= self._totals_tolerance

        if not consistent:
            logger.warning("snapshot_totals_mismatch", extra={
                "product_id": snapshot.product_id,
                "qty_on_hand": str(qty_on_hand),
                "computed_from_by_location": str(computed),
            })
        return SnapshotTotals(
            qty_on_hand=qty_on_hand,
            qty_on_hand_computed_from_by_location=computed,
            mismatch=mismatch,
            is_consistent=consistent,
        )

    def drift_rows(self, result: ReconciliationResult) -> tuple[ReconciliationRow, ...]:
        """Rows whose delta is non-zero, location rows first."""
        return result.drift_rows
