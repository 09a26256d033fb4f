"""Tests for IntegrityChecker (stock_engines/reconciliation/integrity.py)."""

import pytest

from stock_engines.reconciliation.integrity import (
    INVALID_TRANSFER_MOVES,
    MOVEMENTS_WITHOUT_LINES,
    MOVEMENTS_WITHOUT_LOCATION,
    IntegrityChecker,
)
from stock_engines.reconciliation.recon_types import CheckSeverity
from stock_kernel.domain.movement import MovementType
from tests.conftest import make_line, make_movement


@pytest.fixture
def checker() -> IntegrityChecker:
    return IntegrityChecker()


def _well_formed_transfers():
    return [
        make_movement(1, MovementType.TRANSFER, location_in=2, location_out=1, quantity=5,
                      lines=(make_line(7, 5),)),
        make_movement(2, MovementType.DEFECT_REVIEW, location_in=3, location_out=2, quantity=1,
                      lines=(make_line(7, 1),)),
    ]


# =============================================================================
# Invalid transfer-like movements
# =============================================================================


class TestInvalidTransferMoves:

    def test_zero_on_well_formed_ledger(self, checker):
        assert checker.count_invalid_transfer_moves(_well_formed_transfers()) == 0

    @pytest.mark.parametrize("location_in, location_out", [(None, 1), (2, None), (None, None)])
    def test_missing_location_counted(self, checker, location_in, location_out):
        movements = _well_formed_transfers() + [
            make_movement(3, MovementType.DEFECT_SCRAP,
                          location_in=location_in, location_out=location_out, quantity=1),
        ]
        assert checker.count_invalid_transfer_moves(movements) == 1

    def test_non_transfer_with_one_location_is_fine(self, checker):
        movements = [make_movement(1, MovementType.ADJUST_IN, location_in=1, quantity=1)]
        assert checker.count_invalid_transfer_moves(movements) == 0

    def test_finding_is_error_with_note(self, checker):
        movements = [
            make_movement(5, MovementType.TRANSFER, location_in=2, quantity=1),
            make_movement(6, MovementType.DEFECT_NONE, location_out=2, quantity=1),
        ]
        result = checker.check(movements=movements, batch_tracked=False)
        assert result.invalid_transfer_moves == 2
        assert result.error_count == 1
        finding = result.findings[0]
        assert finding.code == INVALID_TRANSFER_MOVES
        assert finding.severity == CheckSeverity.ERROR
        assert finding.movement_ids == (5, 6)
        assert result.notes == (
            "2 transfer-like movements missing locationInId or locationOutId.",
        )

    def test_invalid_transfers_logged(self, checker, captured_logs):
        checker.check(
            movements=[make_movement(5, MovementType.TRANSFER, location_in=2, quantity=1)],
            batch_tracked=False,
        )
        records = [r for r in captured_logs() if r["message"] == "invalid_transfer_moves_detected"]
        assert records and records[0]["count"] == 1


# =============================================================================
# Movements without any location
# =============================================================================


class TestMovementsWithoutLocation:

    def test_zero_when_every_movement_has_a_location(self, checker):
        movements = _well_formed_transfers() + [
            make_movement(3, MovementType.ADJUST_IN, location_in=1, quantity=2),
            make_movement(4, MovementType.ISSUE, location_out=1, quantity=-2),
        ]
        assert checker.count_movements_without_location(movements) == 0

    @pytest.mark.parametrize("movement_type", [
        MovementType.ADJUST_IN, MovementType.PO_RECEIVE, MovementType.UNKNOWN,
    ])
    def test_other_types_without_location_are_errors(self, checker, movement_type):
        movements = _well_formed_transfers() + [make_movement(9, movement_type, quantity=10)]
        result = checker.check(movements=movements, batch_tracked=False)
        assert result.movements_without_location == 1
        (finding,) = result.findings
        assert finding.code == MOVEMENTS_WITHOUT_LOCATION
        assert finding.severity == CheckSeverity.ERROR
        assert finding.movement_ids == (9,)
        assert result.notes == ("1 movements have neither locationInId nor locationOutId.",)

    def test_transfer_without_locations_reported_twice(self, checker):
        movements = [make_movement(5, MovementType.TRANSFER, quantity=1)]
        result = checker.check(movements=movements, batch_tracked=False)
        assert [f.code for f in result.findings] == [
            INVALID_TRANSFER_MOVES, MOVEMENTS_WITHOUT_LOCATION,
        ]

    def test_logged(self, checker, captured_logs):
        checker.check(
            movements=[make_movement(7, MovementType.ADJUST_IN, quantity=1)],
            batch_tracked=False,
        )
        records = [r for r in captured_logs() if r["message"] == "movements_without_location_detected"]
        assert records and records[0]["movement_ids"] == [7]


# =============================================================================
# Movements without lines
# =============================================================================


class TestMovementsWithoutLines:

    def test_counts_header_only_movements(self, checker):
        movements = _well_formed_transfers() + [
            make_movement(3, MovementType.ADJUST_IN, location_in=1, quantity=2),
        ]
        assert checker.count_movements_without_lines(movements) == 1

    def test_note_only_when_batch_tracked(self, checker):
        movements = [make_movement(3, MovementType.ADJUST_IN, location_in=1, quantity=2)]

        tracked = checker.check(movements=movements, batch_tracked=True)
        assert tracked.notes == ("1 movements have no lines while batch tracking is enabled.",)
        assert tracked.findings[0].code == MOVEMENTS_WITHOUT_LINES
        assert tracked.findings[0].severity == CheckSeverity.WARNING

        untracked = checker.check(movements=movements, batch_tracked=False)
        assert untracked.is_clean
        assert untracked.movements_without_lines == 1

    def test_clean_ledger(self, checker):
        result = checker.check(movements=_well_formed_transfers(), batch_tracked=True)
        assert result.is_clean
        assert result.notes == ()
        assert result.movements_checked == 2


class TestCombined:

    def test_note_order_lines_then_transfers(self, checker):
        movements = [
            make_movement(1, MovementType.TRANSFER, location_in=2, quantity=1),
            make_movement(2, MovementType.ADJUST_IN, location_in=1, quantity=1),
        ]
        result = checker.check(movements=movements, batch_tracked=True)
        assert [f.code for f in result.findings] == [
            MOVEMENTS_WITHOUT_LINES, INVALID_TRANSFER_MOVES,
        ]
        assert result.notes[0].startswith("2 movements have no lines")

    def test_accepts_generator(self, checker):
        result = checker.check(
            movements=(m for m in _well_formed_transfers()), batch_tracked=True,
        )
        assert result.movements_checked == 2
