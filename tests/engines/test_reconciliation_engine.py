"""Tests for ReconciliationEngine (stock_engines/reconciliation/comparison.py)."""

from decimal import Decimal

import pytest

from stock_engines.reconciliation.comparison import (
    SNAPSHOT_MISSING_NOTE,
    ReconciliationEngine,
)
from stock_engines.reconciliation.ledger import LedgerAggregator
from stock_kernel.domain.balances import SnapshotBatchRow, SnapshotLocationRow, StockSnapshot
from tests.conftest import make_snapshot

D = Decimal


@pytest.fixture
def engine() -> ReconciliationEngine:
    return ReconciliationEngine()


@pytest.fixture
def expected(scenario_movements):
    return LedgerAggregator().aggregate(movements=scenario_movements)


def _deltas(rows):
    return {(row.location_id, row.batch_id): row.delta for row in rows}


# =============================================================================
# compare
# =============================================================================


class TestCompare:

    def test_matching_snapshot_has_zero_deltas(self, engine, expected):
        snapshot = make_snapshot(
            {1: "-2", 2: "5"},
            {(1, None): "-5", (1, 7): "3", (2, None): "5"},
        )
        result = engine.compare(expected=expected, snapshot=snapshot)
        assert not result.snapshot_missing
        assert all(row.delta == 0 for row in result.compare_by_location)
        assert all(row.delta == 0 for row in result.compare_by_location_batch)
        assert not result.has_drift
        assert result.notes == ()

    def test_drift_on_location(self, engine, expected):
        snapshot = make_snapshot({1: "0", 2: "5"})
        result = engine.compare(expected=expected, snapshot=snapshot)
        assert _deltas(result.compare_by_location) == {(1, None): D("2.0000"), (2, None): D("0.0000")}
        drift = engine.drift_rows(result)
        assert drift[0].location_id == 1
        assert drift[0].expected_from_ledger == D("-2.0000")
        assert drift[0].snapshot_qty == D("0")

    def test_missing_snapshot_compares_against_zero(self, engine, expected):
        result = engine.compare(expected=expected, snapshot=None)
        assert result.snapshot_missing
        assert result.notes == (SNAPSHOT_MISSING_NOTE,)
        assert _deltas(result.compare_by_location) == {(1, None): D("2.0000"), (2, None): D("-5.0000")}
        assert len(result.compare_by_location_batch) == 3

    def test_empty_snapshot_is_missing(self, engine, expected):
        result = engine.compare(expected=expected, snapshot=StockSnapshot(product_id=1))
        assert result.snapshot_missing

    def test_snapshot_with_only_batch_rows_is_not_missing(self, engine, expected):
        snapshot = StockSnapshot(
            product_id=1,
            by_location_batch=(SnapshotBatchRow(location_id=1, batch_id=7, qty=D("3")),),
        )
        result = engine.compare(expected=expected, snapshot=snapshot)
        assert not result.snapshot_missing
        assert _deltas(result.compare_by_location_batch)[(1, 7)] == 0

    def test_snapshot_only_keys_not_synthesized(self, engine, expected):
        snapshot = make_snapshot({1: "-2", 2: "5", 99: "10"}, {(99, 1): "10"})
        result = engine.compare(expected=expected, snapshot=snapshot)
        assert [row.location_id for row in result.compare_by_location] == [1, 2]
        assert all(row.location_id != 99 for row in result.compare_by_location_batch)

    def test_rows_follow_expected_key_order(self, engine, expected):
        result = engine.compare(expected=expected, snapshot=None)
        assert [(r.location_id, r.batch_id) for r in result.compare_by_location_batch] == [
            (1, None), (1, 7), (2, None),
        ]

    def test_delta_is_rounded(self, engine, expected):
        snapshot = make_snapshot({1: "-1.99996", 2: "5"})
        result = engine.compare(expected=expected, snapshot=snapshot)
        assert _deltas(result.compare_by_location)[(1, None)] == D("0.0000")

    def test_later_snapshot_row_wins_for_repeated_key(self, engine, expected):
        snapshot = StockSnapshot(
            product_id=1,
            by_location=(
                SnapshotLocationRow(location_id=1, qty=D("-2")),
                SnapshotLocationRow(location_id=2, qty=D("5")),
                SnapshotLocationRow(location_id=2, qty=D("4")),
            ),
        )
        result = engine.compare(expected=expected, snapshot=snapshot)
        assert _deltas(result.compare_by_location)[(2, None)] == D("-1.0000")

    def test_batch_code_from_ledger_then_snapshot(self, engine, expected):
        snapshot = StockSnapshot(
            product_id=1,
            by_location_batch=(
                SnapshotBatchRow(location_id=1, batch_id=7, qty=D("3"), batch_code="SNAP-7"),
            ),
        )
        result = engine.compare(expected=expected, snapshot=snapshot)
        codes = {(r.location_id, r.batch_id): r.batch_code for r in result.compare_by_location_batch}
        assert codes == {(1, None): None, (1, 7): "SNAP-7", (2, None): None}

    def test_compare_is_deterministic(self, engine, expected):
        snapshot = make_snapshot({1: "0", 2: "5"})
        assert engine.compare(expected=expected, snapshot=snapshot) == engine.compare(
            expected=expected, snapshot=snapshot,
        )

    def test_drift_logged(self, engine, expected, captured_logs):
        engine.compare(expected=expected, snapshot=None)
        assert any(r["message"] == "reconciliation_drift_detected" for r in captured_logs())


# =============================================================================
# check_snapshot_totals
# =============================================================================


class TestSnapshotTotals:

    def test_consistent_totals(self, engine):
        totals = engine.check_snapshot_totals(make_snapshot({1: "2.5", 2: "3"}, total="5.5"))
        assert totals.is_consistent
        assert totals.note is None
        assert totals.qty_on_hand == D("5.5000")
        assert totals.qty_on_hand_computed_from_by_location == D("5.5000")

    def test_mismatch_note(self, engine):
        totals = engine.check_snapshot_totals(make_snapshot({1: "2", 2: "3"}, total="6"))
        assert not totals.is_consistent
        assert totals.mismatch == D("1.0000")
        assert totals.note == "Totals mismatch: totalQty=6.0000 vs sum(byLocation)=5.0000"

    def test_rounding_noise_is_not_a_mismatch(self, engine):
        totals = engine.check_snapshot_totals(make_snapshot({1: "2.00001", 2: "3"}, total="5"))
        assert totals.is_consistent

    def test_tolerance(self):
        engine = ReconciliationEngine(totals_tolerance=D("0.5"))
        totals = engine.check_snapshot_totals(make_snapshot({1: "2"}, total="2.4"))
        assert totals.is_consistent

    def test_missing_snapshot_totals_are_zero(self, engine):
        totals = engine.check_snapshot_totals(None)
        assert totals.is_consistent
        assert totals.qty_on_hand == D("0.0000")
