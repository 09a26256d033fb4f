"""
Movement ledger domain types.

Responsibility:
    Frozen value objects for the append-only movement ledger: the movement
    header, its batch-level lines, the movement-type vocabulary and the
    reason reference that links a movement to the business document that
    produced it.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  Populated by the
    persistence adapters (selectors) and consumed by the pure engines.

Invariants enforced:
    - Movement types come from one fully listed enum; the transfer-like
      category is an explicit predicate, not string pattern matching.
    - A movement carries exactly one ``ReasonRef``; when several reason ids
      are present the precedence is assembly activity > assembly > job >
      purchase order line > shipping line > expense > costing.
    - Movements and lines are immutable once read (append-only ledger).

Failure modes:
    - None raised.  Unknown type strings map to ``MovementType.UNKNOWN`` and
      keep their raw text for display and statistics.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from stock_kernel.domain.quantities import ZERO


class MovementType(str, Enum):
    """Every movement type the ledger is known to contain."""

    TRANSFER = "transfer"
    DEFECT_NONE = "defect_none"
    DEFECT_REVIEW = "defect_review"
    DEFECT_SCRAP = "defect_scrap"
    DEFECT_OFF_SPEC = "defect_off_spec"
    DEFECT_SAMPLE = "defect_sample"
    RETAIN = "retain"
    AMENDMENT = "amendment"
    ASSEMBLY = "assembly"
    PO_RECEIVE = "po (receive)"
    ADJUST_IN = "adjust_in"
    ADJUST_OUT = "adjust_out"
    ISSUE = "issue"
    CONSUME = "consume"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, raw: str | None) -> MovementType:
        """Map a stored type string (any case, padded) onto the enum."""
        if raw is None:
            return cls.UNKNOWN
        normalized = str(raw).strip().lower()
        try:
            return cls(normalized)
        except ValueError:
            return cls.UNKNOWN


TRANSFER_LIKE_TYPES: frozenset[MovementType] = frozenset({
    MovementType.TRANSFER,
    MovementType.DEFECT_NONE,
    MovementType.DEFECT_REVIEW,
    MovementType.DEFECT_SCRAP,
    MovementType.DEFECT_OFF_SPEC,
    MovementType.DEFECT_SAMPLE,
})


def is_transfer_like(movement_type: MovementType) -> bool:
    """True for transfers and every defect disposition."""
    return movement_type in TRANSFER_LIKE_TYPES


def normalize_type_label(raw: str | None) -> str:
    """Statistics bucket for a raw type string: ``lower(trim(raw or 'unknown'))``."""
    text = (raw or "").strip().lower()
    return text or "unknown"


class ReasonKind(str, Enum):
    """Business document a movement was booked against."""

    ASSEMBLY_ACTIVITY = "assemblyActivity"
    ASSEMBLY = "assembly"
    JOB = "job"
    PURCHASE_ORDER_LINE = "purchaseOrderLine"
    SHIPPING_LINE = "shippingLine"
    EXPENSE = "expense"
    COSTING = "costing"
    NONE = "none"


@dataclass(frozen=True)
class ReasonRef:
    """Tagged reference to the document behind a movement."""

    kind: ReasonKind
    id: int | None = None

    @classmethod
    def none(cls) -> ReasonRef:
        return cls(ReasonKind.NONE, None)

    @classmethod
    def resolve(
        cls,
        *,
        assembly_activity_id: int | None = None,
        assembly_id: int | None = None,
        job_id: int | None = None,
        purchase_order_line_id: int | None = None,
        shipping_line_id: int | None = None,
        expense_id: int | None = None,
        costing_id: int | None = None,
    ) -> ReasonRef:
        """Pick the first set id in precedence order."""
        candidates = (
            (ReasonKind.ASSEMBLY_ACTIVITY, assembly_activity_id),
            (ReasonKind.ASSEMBLY, assembly_id),
            (ReasonKind.JOB, job_id),
            (ReasonKind.PURCHASE_ORDER_LINE, purchase_order_line_id),
            (ReasonKind.SHIPPING_LINE, shipping_line_id),
            (ReasonKind.EXPENSE, expense_id),
            (ReasonKind.COSTING, costing_id),
        )
        for kind, ref_id in candidates:
            # Zero is not a valid id; treat it like missing.
            if ref_id:
                return cls(kind, ref_id)
        return cls.none()

    @property
    def is_none(self) -> bool:
        return self.kind is ReasonKind.NONE


@dataclass(frozen=True)
class MovementLine:
    """Batch-level decomposition of a movement's quantity.

    ``batch_id=None`` means untracked / aggregate stock.
    """

    id: int | None
    movement_id: int | None
    batch_id: int | None = None
    quantity: Decimal = ZERO
    batch_code: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class Movement:
    """One ledger entry: stock entering and/or leaving a location.

    ``quantity`` is the header quantity, only used when the movement has no
    lines.  ``movement_type_raw`` keeps the stored string for display.
    """

    id: int
    movement_type: MovementType
    product_id: int | None = None
    date: datetime | None = None
    location_in_id: int | None = None
    location_out_id: int | None = None
    quantity: Decimal = ZERO
    reason: ReasonRef = ReasonRef.none()
    lines: tuple[MovementLine, ...] = ()
    movement_type_raw: str | None = None
    created_by: str | None = None
    notes: str | None = None

    @property
    def is_transfer_like(self) -> bool:
        return is_transfer_like(self.movement_type)

    @property
    def has_lines(self) -> bool:
        return len(self.lines) > 0

    @property
    def has_any_location(self) -> bool:
        return self.location_in_id is not None or self.location_out_id is not None

    @property
    def type_label(self) -> str:
        """Statistics bucket for this movement's type."""
        if self.movement_type_raw is not None:
            return normalize_type_label(self.movement_type_raw)
        return self.movement_type.value
