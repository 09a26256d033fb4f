"""
Property-based tests for the ledger aggregation and comparison engines.

Hypothesis generates arbitrary ledgers (every movement type, missing
locations, batch and header-only movements) and checks the algebraic
properties the report relies on:

- Aggregation ignores movement order.
- Partial accumulators merge to the same result as a single pass.
- Well-formed transfers conserve total stock.
- Location totals equal the sum of their (location, batch) rows.
- A snapshot equal to the ledger shows no drift.
"""

from decimal import Decimal

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from stock_engines.reconciliation.comparison import ReconciliationEngine
from stock_engines.reconciliation.ledger import LedgerAccumulator, LedgerAggregator
from stock_kernel.domain.balances import SnapshotBatchRow, SnapshotLocationRow, StockSnapshot
from stock_kernel.domain.movement import TRANSFER_LIKE_TYPES, MovementType
from tests.conftest import make_line, make_movement

LOCATIONS = st.one_of(st.none(), st.integers(min_value=1, max_value=4))
BATCHES = st.one_of(st.none(), st.integers(min_value=1, max_value=3))
# Four places so rounding never changes a sum.
QUANTITIES = st.decimals(
    min_value=Decimal("-1000"), max_value=Decimal("1000"), places=4,
    allow_nan=False, allow_infinity=False,
)


@st.composite
def movements(draw, types=st.sampled_from(list(MovementType)), locations=LOCATIONS):
    count = draw(st.integers(min_value=0, max_value=25))
    result = []
    for movement_id in range(1, count + 1):
        lines = tuple(
            make_line(draw(BATCHES), draw(QUANTITIES), line_id=movement_id * 100 + i)
            for i in range(draw(st.integers(min_value=0, max_value=3)))
        )
        result.append(make_movement(
            movement_id,
            draw(types),
            location_in=draw(locations),
            location_out=draw(locations),
            quantity=draw(QUANTITIES),
            lines=lines,
        ))
    return result


_settings = settings(
    max_examples=75,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
)


class TestAggregationProperties:

    @_settings
    @given(ledger=movements(), data=st.data())
    def test_order_independent(self, ledger, data):
        shuffled = data.draw(st.permutations(ledger))
        aggregator = LedgerAggregator()
        assert aggregator.aggregate(movements=shuffled) == aggregator.aggregate(movements=ledger)

    @_settings
    @given(ledger=movements(), data=st.data())
    def test_merge_matches_single_pass(self, ledger, data):
        split = data.draw(st.integers(min_value=0, max_value=len(ledger)))
        left = LedgerAccumulator().extend(ledger[:split])
        right = LedgerAccumulator().extend(ledger[split:])
        assert left.merge(right).result() == LedgerAccumulator().extend(ledger).result()

    @_settings
    @given(ledger=movements(
        types=st.sampled_from(sorted(TRANSFER_LIKE_TYPES, key=lambda t: t.value)),
        locations=st.integers(min_value=1, max_value=4),
    ))
    def test_complete_transfers_conserve_stock(self, ledger):
        assert LedgerAggregator().aggregate(movements=ledger).total == 0

    @_settings
    @given(ledger=movements())
    def test_location_totals_match_batch_rows(self, ledger):
        aggregate = LedgerAggregator().aggregate(movements=ledger)
        for location_id, qty in aggregate.by_location.items():
            batch_sum = sum(
                (v for k, v in aggregate.by_location_batch.items() if k.location_id == location_id),
                Decimal("0"),
            )
            assert batch_sum == qty
        assert aggregate.movement_count == len(ledger)


class TestComparisonProperties:

    @_settings
    @given(ledger=movements())
    def test_snapshot_equal_to_ledger_has_no_drift(self, ledger):
        expected = LedgerAggregator().aggregate(movements=ledger)
        snapshot = StockSnapshot(
            product_id=1,
            total=expected.total,
            by_location=tuple(
                SnapshotLocationRow(location_id=loc, qty=qty)
                for loc, qty in expected.by_location.items()
            ),
            by_location_batch=tuple(
                SnapshotBatchRow(location_id=key.location_id, batch_id=key.batch_id, qty=qty)
                for key, qty in expected.by_location_batch.items()
            ),
        )
        engine = ReconciliationEngine()
        result = engine.compare(expected=expected, snapshot=snapshot)
        assert not result.has_drift
        assert engine.check_snapshot_totals(snapshot).is_consistent

    @_settings
    @given(ledger=movements())
    def test_missing_snapshot_delta_is_negated_expectation(self, ledger):
        expected = LedgerAggregator().aggregate(movements=ledger)
        result = ReconciliationEngine().compare(expected=expected, snapshot=None)
        for row in result.compare_by_location_batch:
            assert row.delta == -expected.by_location_batch[row.key]
