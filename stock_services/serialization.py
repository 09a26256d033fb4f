"""
stock_services.serialization -- JSON-ready payload builders for the report.

Responsibility:
    Turn engine results and domain objects into the report's stable,
    camelCase field layout.  Every value produced here is a plain dict,
    list, str, int, bool or None.

Architecture position:
    Services -- presentation-neutral shaping only.  No I/O, no business
    rules; the engines decide every number, this module only renders it.

Invariants enforced:
    - Quantities render as fixed-point strings with the configured number
      of places (``"-5.0000"``), never floats, so values survive JSON
      without binary noise.  Negative zero renders as zero.
    - Row order is the order the engines produced, which is deterministic.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal
from typing import Any

from stock_kernel.domain.balances import StockSnapshot
from stock_kernel.domain.movement import Movement
from stock_kernel.domain.product import ProductInfo
from stock_kernel.domain.quantities import QUANTITY_DECIMAL_PLACES, ZERO, round_qty
from stock_engines.reconciliation.recon_types import (
    LedgerAggregate,
    MovementStats,
    ReconciliationResult,
    ReconciliationRow,
    SnapshotTotals,
)

SNAPSHOT_SOURCE = "product_stock_snapshot"
NO_SNAPSHOT_ROWS_NOTE = "No rows found for product."
NO_FILTERS_NOTE = "No filters applied."


def format_qty(value: Decimal, places: int = QUANTITY_DECIMAL_PLACES) -> str:
    """Render a quantity as a fixed-point string; ``Decimal("-0")`` becomes ``"0.0000"``."""
    rounded = round_qty(value, places)
    if rounded == ZERO:
        rounded = round_qty(ZERO, places)
    return f"{rounded:f}"


def format_cursor(cursor: int | None) -> str | None:
    return str(cursor) if cursor is not None else None


# =============================================================================
# Inputs
# =============================================================================


def serialize_product(product: ProductInfo) -> dict[str, Any]:
    return {
        "id": product.id,
        "sku": product.sku,
        "name": product.name,
        "type": product.type,
        "stockTrackingEnabled": product.stock_tracking_enabled,
        "batchTrackingEnabled": product.batch_tracking_enabled,
    }


# =============================================================================
# Snapshot section
# =============================================================================


def serialize_snapshot(
    snapshot: StockSnapshot | None,
    totals: SnapshotTotals,
    places: int = QUANTITY_DECIMAL_PLACES,
) -> dict[str, Any]:
    """Snapshot summary with per-location batches and the totals check."""
    if snapshot is None or snapshot.is_empty:
        return {
            "source": SNAPSHOT_SOURCE,
            "filters": {"notes": NO_SNAPSHOT_ROWS_NOTE},
            "byLocation": [],
            "totals": {
                "qtyOnHand": format_qty(ZERO, places),
                "qtyOnHandComputedFromByLocation": format_qty(ZERO, places),
            },
        }

    by_location = [
        {
            "locationId": row.location_id,
            "locationName": row.location_name or "",
            "qty": format_qty(row.qty, places),
            "byBatch": [
                {
                    "batchId": batch.batch_id,
                    "batchCode": batch.batch_code,
                    "qty": format_qty(batch.qty, places),
                }
                for batch in snapshot.batches_at(row.location_id)
            ],
        }
        for row in snapshot.by_location
    ]
    return {
        "source": SNAPSHOT_SOURCE,
        "filters": {"notes": totals.note or NO_FILTERS_NOTE},
        "byLocation": by_location,
        "totals": {
            "qtyOnHand": format_qty(totals.qty_on_hand, places),
            "qtyOnHandComputedFromByLocation": format_qty(
                totals.qty_on_hand_computed_from_by_location, places,
            ),
        },
    }


# =============================================================================
# Ledger section
# =============================================================================


def serialize_stats(stats: MovementStats) -> dict[str, Any]:
    return {
        "totalMovements": stats.total_movements,
        "renderedMovements": stats.rendered_movements,
        "types": dict(stats.types),
    }


def serialize_movement(
    movement: Movement,
    places: int = QUANTITY_DECIMAL_PLACES,
) -> dict[str, Any]:
    reason = movement.reason
    return {
        "movementId": movement.id,
        "movementTypeRaw": movement.movement_type_raw or "",
        "movementType": movement.movement_type.value,
        "date": movement.date.isoformat() if movement.date else None,
        "createdBy": movement.created_by,
        "reason": {
            "type": None if reason.is_none else reason.kind.value,
            "id": reason.id,
        },
        "locationOut": {"id": movement.location_out_id},
        "locationIn": {"id": movement.location_in_id},
        "qtyHeader": format_qty(movement.quantity, places),
        "lines": [
            {
                "lineId": line.id,
                "batch": {"id": line.batch_id, "code": line.batch_code},
                "qty": format_qty(line.quantity, places),
            }
            for line in movement.lines
        ],
    }


def serialize_ledger(
    movements: Sequence[Movement],
    stats: MovementStats,
    next_cursor: int | None,
    places: int = QUANTITY_DECIMAL_PLACES,
) -> dict[str, Any]:
    return {
        "movementStats": serialize_stats(stats),
        "movements": [serialize_movement(m, places) for m in movements],
        "paging": {"nextCursor": format_cursor(next_cursor)},
    }


def empty_ledger(stats: MovementStats | None = None) -> dict[str, Any]:
    """Ledger block for an excluded or failed ledger section."""
    return {
        "movementStats": serialize_stats(stats or MovementStats()),
        "movements": [],
        "paging": {"nextCursor": None},
    }


# =============================================================================
# Reconciliation section
# =============================================================================


def _compare_row(row: ReconciliationRow, places: int, with_batch: bool) -> dict[str, Any]:
    payload: dict[str, Any] = {"locationId": row.location_id}
    if with_batch:
        payload["batchId"] = row.batch_id
        payload["batchCode"] = row.batch_code
    payload["expectedFromLedger"] = format_qty(row.expected_from_ledger, places)
    payload["snapshotQty"] = format_qty(row.snapshot_qty, places)
    payload["delta"] = format_qty(row.delta, places)
    return payload


def serialize_reconciliation(
    expected: LedgerAggregate,
    result: ReconciliationResult,
    notes: Sequence[str],
    places: int = QUANTITY_DECIMAL_PLACES,
) -> dict[str, Any]:
    return {
        "basis": "all_movements",
        "expectedFromLedger": {
            "byLocation": [
                {"locationId": location_id, "expectedQty": format_qty(qty, places)}
                for location_id, qty in expected.by_location.items()
            ],
            "byLocationBatch": [
                {
                    "locationId": key.location_id,
                    "batchId": key.batch_id,
                    "batchCode": (
                        expected.batch_codes.get(key.batch_id)
                        if key.batch_id is not None else None
                    ),
                    "expectedQty": format_qty(qty, places),
                }
                for key, qty in expected.by_location_batch.items()
            ],
        },
        "compareToSnapshot": {
            "byLocation": [
                _compare_row(row, places, with_batch=False)
                for row in result.compare_by_location
            ],
            "byLocationBatch": [
                _compare_row(row, places, with_batch=True)
                for row in result.compare_by_location_batch
            ],
        },
        "notes": list(notes),
    }
