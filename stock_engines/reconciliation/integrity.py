"""
IntegrityChecker -- structural scans over the movement ledger.

Finds movements the ledger aggregation cannot fully account for.  The
findings are advisory: they become report notes and never block
aggregation.

Architecture: stock_engines -- pure calculation, zero I/O.

Checks:
    MOVEMENTS_WITHOUT_LINES  header-only movements on a batch-tracked
                             product (WARNING; only reported when the
                             product is batch tracked)
    INVALID_TRANSFER_MOVES   transfer-like movements missing either
                             location (ERROR; the aggregation undercounts
                             the missing side)
    MOVEMENTS_WITHOUT_LOCATION  movements of any type with neither location
                             set (ERROR; they contribute nothing to the
                             expected balances)
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from stock_kernel.domain.movement import Movement
from stock_kernel.logging_config import get_logger
from stock_engines.tracer import traced_engine

from stock_engines.reconciliation.recon_types import (
    CheckSeverity,
    IntegrityCheckResult,
    IntegrityFinding,
)

logger = get_logger("engines.reconciliation.integrity")

MOVEMENTS_WITHOUT_LINES = "MOVEMENTS_WITHOUT_LINES"
INVALID_TRANSFER_MOVES = "INVALID_TRANSFER_MOVES"
MOVEMENTS_WITHOUT_LOCATION = "MOVEMENTS_WITHOUT_LOCATION"


def _movements_without_lines(movements: Iterable[Movement]) -> list[Movement]:
    return [m for m in movements if not m.has_lines]


def _invalid_transfer_moves(movements: Iterable[Movement]) -> list[Movement]:
    return [
        m for m in movements
        if m.is_transfer_like
        and (m.location_in_id is None or m.location_out_id is None)
    ]


def _movements_without_location(movements: Iterable[Movement]) -> list[Movement]:
    return [m for m in movements if not m.has_any_location]


class IntegrityChecker:
    """Pure engine for ledger integrity scans.

    Usage:
        checker = IntegrityChecker()
        result = checker.check(movements=movements, batch_tracked=True)
        result.notes  # ("2 movements have no lines while batch tracking is enabled.",)
    """

    def count_movements_without_lines(self, movements: Iterable[Movement]) -> int:
        return len(_movements_without_lines(movements))

    def count_invalid_transfer_moves(self, movements: Iterable[Movement]) -> int:
        return len(_invalid_transfer_moves(movements))

    def count_movements_without_location(self, movements: Iterable[Movement]) -> int:
        return len(_movements_without_location(movements))

    @traced_engine(
        "integrity_checker", "1.0",
        fingerprint_fields=("movements", "batch_tracked"),
    )
    def check(
        self,
        movements: Sequence[Movement],
        batch_tracked: bool,
    ) -> IntegrityCheckResult:
        movements = tuple(movements)
        without_lines = _movements_without_lines(movements)
        invalid_transfers = _invalid_transfer_moves(movements)
        unlocated = _movements_without_location(movements)

        findings: list[IntegrityFinding] = []
        if batch_tracked and without_lines:
            findings.append(IntegrityFinding(
                code=MOVEMENTS_WITHOUT_LINES,
                severity=CheckSeverity.WARNING,
                message=(
                    f"{len(without_lines)} movements have no lines "
                    "while batch tracking is enabled."
                ),
                count=len(without_lines),
                movement_ids=tuple(m.id for m in without_lines),
            ))
        if invalid_transfers:
            findings.append(IntegrityFinding(
                code=INVALID_TRANSFER_MOVES,
                severity=CheckSeverity.ERROR,
                message=(
                    f"{len(invalid_transfers)} transfer-like movements "
                    "missing locationInId or locationOutId."
                ),
                count=len(invalid_transfers),
                movement_ids=tuple(m.id for m in invalid_transfers),
            ))
            logger.warning("invalid_transfer_moves_detected", extra={
                "count": len(invalid_transfers),
                "movement_ids": [m.id for m in invalid_transfers[:20]],
            })
        if unlocated:
            findings.append(IntegrityFinding(
                code=MOVEMENTS_WITHOUT_LOCATION,
                severity=CheckSeverity.ERROR,
                message=(
                    f"{len(unlocated)} movements have neither "
                    "locationInId nor locationOutId."
                ),
                count=len(unlocated),
                movement_ids=tuple(m.id for m in unlocated),
            ))
            logger.warning("movements_without_location_detected", extra={
                "count": len(unlocated),
                "movement_ids": [m.id for m in unlocated[:20]],
            })

        return IntegrityCheckResult(
            movements_checked=len(movements),
            movements_without_lines=len(without_lines),
            invalid_transfer_moves=len(invalid_transfers),
            movements_without_location=len(unlocated),
            findings=tuple(findings),
        )
