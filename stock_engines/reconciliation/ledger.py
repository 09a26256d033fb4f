"""
Module: stock_engines.reconciliation.ledger
Responsibility:
    Reconstruct expected per-location and per-(location, batch) stock
    balances from the movement ledger.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import stock_kernel/domain.

Invariants enforced:
    - Transfer-like movements (transfer and every defect disposition) add
      ``+abs(q)`` on the in side and ``-abs(q)`` on the out side, whatever
      the stored sign.  Each side is applied only when its location is set.
    - Every other movement type adds the stored quantity, unmodified, to
      each location that is set.  The stored sign is assumed to encode
      direction already (an ``adjust_out`` is recorded negative).
    - A movement with no lines contributes one implicit line: batch None,
      header quantity.
    - By-location balances are summed from the unrounded batch balances;
      rounding to 4 places happens once, at the end.
    - Accumulation is commutative and associative: the result does not
      depend on movement order or on how the ledger was split into pages.

Failure modes:
    - InvalidMovementError when something other than a Movement is passed.
    - A transfer-like movement missing one location loses that side here,
      and a movement with neither location contributes nothing;
      IntegrityChecker reports both.

Audit relevance:
    The expected balances are the ledger's side of every reconciliation
    row.  Each aggregation is traced via ``@traced_engine``.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from decimal import Decimal
from types import MappingProxyType

from stock_kernel.domain.balances import BalanceKey, location_sort_key
from stock_kernel.domain.movement import Movement
from stock_kernel.domain.quantities import QUANTITY_DECIMAL_PLACES, ZERO, round_qty
from stock_kernel.exceptions import InvalidMovementError
from stock_kernel.logging_config import get_logger
from stock_engines.tracer import traced_engine

from stock_engines.reconciliation.recon_types import ContributionEvent, LedgerAggregate

logger = get_logger("engines.reconciliation.ledger")


def expand_movement(movement: Movement) -> tuple[ContributionEvent, ...]:
    """Expand one movement into signed contributions per (location, batch).

    Header-only movements become a single event with ``batch_id=None``.
    """
    if not isinstance(movement, Movement):
        raise InvalidMovementError(movement)

    if movement.has_lines:
        parts = [(line.batch_id, line.quantity) for line in movement.lines]
    else:
        parts = [(None, movement.quantity)]

    events: list[ContributionEvent] = []
    transfer_like = movement.is_transfer_like
    for batch_id, quantity in parts:
        if transfer_like:
            inbound = abs(quantity)
            outbound = -abs(quantity)
        else:
            inbound = outbound = quantity

        if movement.location_in_id is not None:
            events.append(ContributionEvent(
                movement_id=movement.id,
                location_id=movement.location_in_id,
                batch_id=batch_id,
                quantity=inbound,
            ))
        if movement.location_out_id is not None:
            events.append(ContributionEvent(
                movement_id=movement.id,
                location_id=movement.location_out_id,
                batch_id=batch_id,
                quantity=outbound,
            ))
    return tuple(events)


class LedgerAccumulator:
    """Mergeable running sum of ledger contributions.

    Contract:
        Feed movements (or whole pages) in any order with ``add_movement``
        / ``extend``; combine partial accumulators with ``merge``; call
        ``result()`` once to get the rounded aggregate.
    Guarantees:
        - Sums are kept unrounded until ``result()``.
        - ``a.merge(b)`` followed by ``result()`` equals accumulating the
          union of both inputs directly.
    """

    def __init__(self) -> None:
        self._sums: defaultdict[BalanceKey, Decimal] = defaultdict(lambda: ZERO)
        self._batch_codes: dict[int, str] = {}
        self._movement_count = 0

    @property
    def movement_count(self) -> int:
        return self._movement_count

    def add_event(self, event: ContributionEvent) -> None:
        self._sums[event.key] += event.quantity

    def add_movement(self, movement: Movement) -> None:
        for event in expand_movement(movement):
            self.add_event(event)
        for line in movement.lines:
            if line.batch_id is not None and line.batch_code:
                self._batch_codes.setdefault(line.batch_id, line.batch_code)
        self._movement_count += 1

    def extend(self, movements: Iterable[Movement]) -> LedgerAccumulator:
        for movement in movements:
            self.add_movement(movement)
        return self

    def merge(self, other: LedgerAccumulator) -> LedgerAccumulator:
        """Fold ``other`` into this accumulator and return self."""
        for key, qty in other._sums.items():
            self._sums[key] += qty
        for batch_id, code in other._batch_codes.items():
            self._batch_codes.setdefault(batch_id, code)
        self._movement_count += other._movement_count
        return self

    def result(self, decimal_places: int = QUANTITY_DECIMAL_PLACES) -> LedgerAggregate:
        by_location_raw: defaultdict[int | None, Decimal] = defaultdict(lambda: ZERO)
        for key, qty in self._sums.items():
            by_location_raw[key.location_id] += qty

        by_location_batch = {
            key: round_qty(self._sums[key], decimal_places)
            for key in sorted(self._sums, key=BalanceKey.sort_key)
        }
        by_location = {
            location_id: round_qty(by_location_raw[location_id], decimal_places)
            for location_id in sorted(by_location_raw, key=location_sort_key)
        }
        return LedgerAggregate(
            by_location=MappingProxyType(by_location),
            by_location_batch=MappingProxyType(by_location_batch),
            movement_count=self._movement_count,
            batch_codes=MappingProxyType(dict(sorted(self._batch_codes.items()))),
        )


class LedgerAggregator:
    """Pure engine turning a movement list into expected balances.

    Usage:
        aggregator = LedgerAggregator()
        expected = aggregator.aggregate(movements=movements)
        expected.by_location[2]           # Decimal("5.0000")
        expected.by_location_batch[(1, 7)]  # Decimal("3.0000")
    """

    def __init__(self, decimal_places: int = QUANTITY_DECIMAL_PLACES):
        self._decimal_places = decimal_places

    @traced_engine("ledger_aggregator", "1.0", fingerprint_fields=("movements",))
    def aggregate(self, movements: Iterable[Movement]) -> LedgerAggregate:
        accumulator = LedgerAccumulator().extend(movements)
        aggregate = accumulator.result(self._decimal_places)

        logger.debug("ledger_aggregated", extra={
            "movement_count": aggregate.movement_count,
            "location_keys": len(aggregate.by_location),
            "batch_keys": len(aggregate.by_location_batch),
        })
        return aggregate
