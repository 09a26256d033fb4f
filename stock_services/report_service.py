"""
stock_services.report_service -- Product stock reconciliation report.

Responsibility:
    Compose the ledger ports and the pure reconciliation engines into one
    JSON-serializable diagnostic report per product: a snapshot summary, a
    paged ledger listing, movement-type statistics and a ledger-vs-snapshot
    reconciliation with integrity notes.

Architecture position:
    Services -- imperative shell over engines + kernel ports.
    Reads through MovementStore, SnapshotProvider and ProductCatalog;
    delegates every number to LedgerAggregator, IntegrityChecker and
    ReconciliationEngine.

Invariants enforced:
    - Read-only: nothing behind the ports is ever written.
    - Section isolation: each of the four sections is built on its own.  A
      failure in one is logged and replaced by a placeholder plus a note;
      the remaining sections still run.
    - Full-ledger sharing: statistics, reconciliation and integrity scans
      share one walk of the entire ledger per request.  The walk pages by id
      alone, so backdated or undated movements are neither skipped nor
      counted twice; only the ledger listing uses the (date, id) order.
    - Deadline: checked before each section and between ledger pages.
      Sections completed before expiry are kept.

Consistency:
    The ledger and the snapshot are read independently, possibly
    milliseconds apart, from a store that is being written to.  The report
    is a best-effort point-in-time view, not a consistent snapshot: a
    movement booked between the two reads shows up as drift.  Callers must
    treat drift on very recent activity accordingly.

Failure modes:
    - Unknown product: ``build_report`` returns None.  This is the only
      hard failure.
    - Everything else (store errors, dirty data, deadline expiry) degrades
      the affected section and is reported in ``notes``.

Output types:
    Every quantity (``qty``, ``qtyHeader``, ``expectedQty``,
    ``expectedFromLedger``, ``snapshotQty``, ``delta`` and the snapshot
    totals) is a fixed-point decimal string such as ``"-2.0000"``, not a
    JSON number.  ``paging.nextCursor`` is a string as well.  Consumers
    that want numbers parse them with ``Decimal``; parsing to float gives
    up the exact 4-place value.

Usage:
    service = ProductStockReportService.from_session(session)
    report = service.build_report(42, ReportParams(limit=50))
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar
from uuid import uuid4

from sqlalchemy.orm import Session

from stock_config.schema import ReconciliationConfig
from stock_engines.reconciliation.comparison import ReconciliationEngine
from stock_engines.reconciliation.integrity import IntegrityChecker
from stock_engines.reconciliation.ledger import LedgerAggregator
from stock_engines.reconciliation.recon_types import MovementStats
from stock_engines.reconciliation.stats import summarize_movement_types
from stock_kernel.domain.balances import StockSnapshot
from stock_kernel.domain.clock import Clock, SystemClock
from stock_kernel.domain.deadline import Deadline
from stock_kernel.domain.movement import Movement
from stock_kernel.domain.ports import (
    MovementOrder,
    MovementPage,
    MovementStore,
    ProductCatalog,
    SnapshotProvider,
)
from stock_kernel.domain.product import ProductInfo
from stock_kernel.domain.quantities import coerce_id
from stock_kernel.exceptions import (
    DeadlineExceededError,
    LedgerError,
    ProductNotFoundError,
    ReportCancelledError,
    SectionBuildError,
)
from stock_kernel.logging_config import LogContext, get_logger
from stock_kernel.selectors.movement_selector import (
    MovementSelector,
    ProductSelector,
    clamp_page_size,
)
from stock_kernel.selectors.snapshot_selector import SnapshotSelector

from stock_services.serialization import (
    empty_ledger,
    serialize_ledger,
    serialize_product,
    serialize_reconciliation,
    serialize_snapshot,
)

logger = get_logger("services.report")

REPORT_MODULE = "productStockDebug"

SECTION_SNAPSHOT = "snapshot"
SECTION_LEDGER = "ledger"
SECTION_STATS = "stats"
SECTION_RECONCILIATION = "reconciliation"

T = TypeVar("T")


@dataclass(frozen=True)
class ReportParams:
    """Caller-supplied report options.

    ``limit`` and ``cursor`` are taken raw: a non-numeric limit falls back
    to the configured default page size, and a non-numeric cursor means
    "first page" while the raw value is still echoed in the report.
    ``None`` for an include flag means "use the configured default".
    """

    limit: object = None
    cursor: object = None
    include_snapshot: bool | None = None
    include_ledger: bool | None = None
    include_reconciliation: bool | None = None


@dataclass(frozen=True)
class _ResolvedParams:
    limit: int
    cursor_raw: object
    cursor_id: int | None
    include_snapshot: bool
    include_ledger: bool
    include_reconciliation: bool

    def to_payload(self) -> dict[str, Any]:
        return {
            "limit": self.limit,
            "cursor": self.cursor_raw,
            "includeSnapshot": self.include_snapshot,
            "includeLedger": self.include_ledger,
            "includeReconciliation": self.include_reconciliation,
        }


class _RequestInputs:
    """Per-request lazy reads shared between sections.

    Successful reads are memoized; a failed read is retried by the next
    section that needs it.
    """

    def __init__(
        self,
        product_id: int,
        movement_store: MovementStore,
        snapshot_provider: SnapshotProvider,
        page_size: int,
        deadline: Deadline,
    ):
        self._product_id = product_id
        self._movement_store = movement_store
        self._snapshot_provider = snapshot_provider
        self._page_size = page_size
        self._deadline = deadline
        self._ledger: tuple[Movement, ...] | None = None
        self._snapshot: StockSnapshot | None = None
        self._snapshot_loaded = False

    def snapshot(self) -> StockSnapshot | None:
        if not self._snapshot_loaded:
            self._snapshot = self._snapshot_provider.get(self._product_id)
            self._snapshot_loaded = True
        return self._snapshot

    def ledger(self) -> tuple[Movement, ...]:
        if self._ledger is None:
            self._ledger = self._walk_ledger()
        return self._ledger

    def _walk_ledger(self) -> tuple[Movement, ...]:
        movements: list[Movement] = []
        cursor: int | None = None
        pages = 0
        while True:
            if pages:
                self._deadline.check("ledger page")
            page = self._movement_store.fetch(
                self._product_id,
                cursor=cursor,
                limit=self._page_size,
                order=MovementOrder.ID_DESC,
            )
            movements.extend(page.movements)
            pages += 1
            if not page.has_more:
                break
            if cursor is not None and page.next_cursor >= cursor:
                raise LedgerError(
                    f"Movement cursor did not advance: {cursor} -> {page.next_cursor}"
                )
            cursor = page.next_cursor

        logger.debug("full_ledger_loaded", extra={
            "product_id": self._product_id,
            "pages": pages,
            "movements": len(movements),
        })
        return tuple(movements)


class ProductStockReportService:
    """
    Builds the product stock reconciliation report.

    Contract:
        ``build_report()`` returns a JSON-serializable dict, or None when
        the product does not exist.  Quantities in it are decimal strings
        (see "Output types" above).

    Guarantees:
        - No section failure escapes; each becomes a placeholder and a note.
        - The full ledger is fetched at most once per successful request.

    Non-goals:
        - Does NOT repair drift or refresh the snapshot.
        - Does NOT provide isolation between the ledger and snapshot reads.
    """

    def __init__(
        self,
        catalog: ProductCatalog,
        movement_store: MovementStore,
        snapshot_provider: SnapshotProvider,
        config: ReconciliationConfig | None = None,
        clock: Clock | None = None,
        aggregator: LedgerAggregator | None = None,
        integrity_checker: IntegrityChecker | None = None,
        reconciliation_engine: ReconciliationEngine | None = None,
    ):
        self._catalog = catalog
        self._movement_store = movement_store
        self._snapshot_provider = snapshot_provider
        self._config = config or ReconciliationConfig()
        self._clock = clock or SystemClock()
        self._aggregator = aggregator or LedgerAggregator(self._config.quantity_places)
        self._integrity = integrity_checker or IntegrityChecker()
        self._reconciliation = reconciliation_engine or ReconciliationEngine(
            decimal_places=self._config.quantity_places,
            totals_tolerance=self._config.totals_tolerance,
        )

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    @classmethod
    def from_session(
        cls,
        session: Session,
        config: ReconciliationConfig | None = None,
        clock: Clock | None = None,
    ) -> ProductStockReportService:
        """Wire the service to the SQLAlchemy selectors over ``session``."""
        config = config or ReconciliationConfig()
        return cls(
            catalog=ProductSelector(session),
            movement_store=MovementSelector(session, max_page_size=config.max_page_size),
            snapshot_provider=SnapshotSelector(session),
            config=config,
            clock=clock,
        )

    def build_report(
        self,
        product_id: int,
        params: ReportParams | None = None,
        deadline: Deadline | None = None,
    ) -> dict[str, Any] | None:
        report_id = str(uuid4())
        with LogContext.bind(product_id=str(product_id), report_id=report_id):
            try:
                return self._build(product_id, params or ReportParams(), deadline)
            except ProductNotFoundError as exc:
                logger.info("report_product_not_found", extra={
                    "product_id": exc.product_id,
                })
                return None

    # -----------------------------------------------------------------
    # Assembly
    # -----------------------------------------------------------------

    def _build(
        self,
        product_id: int,
        params: ReportParams,
        deadline: Deadline | None,
    ) -> dict[str, Any]:
        t0 = time.monotonic()
        product = self._require_product(product_id)
        resolved = self._resolve_params(params)
        if deadline is None:
            deadline = Deadline(self._config.deadline_seconds, self._clock)

        logger.info("report_started", extra={
            "product_id": product_id,
            "limit": resolved.limit,
            "cursor": resolved.cursor_id,
            "include_snapshot": resolved.include_snapshot,
            "include_ledger": resolved.include_ledger,
            "include_reconciliation": resolved.include_reconciliation,
        })

        inputs = _RequestInputs(
            product_id=product_id,
            movement_store=self._movement_store,
            snapshot_provider=self._snapshot_provider,
            page_size=self._config.max_page_size,
            deadline=deadline,
        )
        places = self._config.quantity_places
        content_notes: list[str] = []
        section_notes: list[str] = []

        snapshot_payload = None
        if resolved.include_snapshot:
            snapshot_payload = self._run_section(
                SECTION_SNAPSHOT,
                lambda: self._snapshot_section(inputs, content_notes),
                placeholder=None,
                deadline=deadline,
                notes=section_notes,
            )

        page: MovementPage | None = None
        stats = MovementStats()
        if resolved.include_ledger:
            page = self._run_section(
                SECTION_LEDGER,
                lambda: self._movement_store.fetch(
                    product_id, cursor=resolved.cursor_id, limit=resolved.limit,
                ),
                placeholder=None,
                deadline=deadline,
                notes=section_notes,
            )
            stats = self._run_section(
                SECTION_STATS,
                lambda: summarize_movement_types(movements=inputs.ledger()),
                placeholder=MovementStats(),
                deadline=deadline,
                notes=section_notes,
            )

        if page is None:
            ledger_payload = empty_ledger(stats)
        else:
            stats = stats.with_rendered(len(page.movements))
            ledger_payload = serialize_ledger(
                page.movements, stats, page.next_cursor, places,
            )

        reconciliation_payload = None
        if resolved.include_reconciliation:
            reconciliation_payload = self._run_section(
                SECTION_RECONCILIATION,
                lambda: self._reconciliation_section(product, inputs, content_notes),
                placeholder=None,
                deadline=deadline,
                notes=section_notes,
            )

        notes = content_notes + section_notes
        duration_ms = round((time.monotonic() - t0) * 1000, 2)
        logger.info("report_completed", extra={
            "product_id": product_id,
            "duration_ms": duration_ms,
            "rendered_movements": stats.rendered_movements,
            "notes": len(notes),
            "degraded_sections": len(section_notes),
        })

        return {
            "context": {
                "module": REPORT_MODULE,
                "entity": {"type": "Product", "id": product.id},
                "generatedAt": self._clock.now().isoformat(),
                "version": self._config.report_version,
            },
            "inputs": {
                "product": serialize_product(product),
                "params": resolved.to_payload(),
            },
            "derived": {
                "snapshot": snapshot_payload,
                "ledger": ledger_payload,
                "reconciliation": reconciliation_payload,
            },
            "notes": notes,
        }

    def _require_product(self, product_id: int) -> ProductInfo:
        product = self._catalog.get_product(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    def _resolve_params(self, params: ReportParams) -> _ResolvedParams:
        config = self._config
        limit = clamp_page_size(
            params.limit,
            default=config.default_page_size,
            minimum=config.min_page_size,
            maximum=config.max_page_size,
        )
        # Ids start at 1; a zero or negative cursor means "first page".
        cursor_id = coerce_id(params.cursor)
        if cursor_id is not None and cursor_id <= 0:
            cursor_id = None

        def flag(value: bool | None, default: bool) -> bool:
            return default if value is None else value is not False

        return _ResolvedParams(
            limit=limit,
            cursor_raw=params.cursor,
            cursor_id=cursor_id,
            include_snapshot=flag(params.include_snapshot, config.include_snapshot),
            include_ledger=flag(params.include_ledger, config.include_ledger),
            include_reconciliation=flag(
                params.include_reconciliation, config.include_reconciliation,
            ),
        )

    def _run_section(
        self,
        section: str,
        build: Callable[[], T],
        placeholder: T,
        deadline: Deadline,
        notes: list[str],
    ) -> T:
        """Build one section, degrading to ``placeholder`` on any failure."""
        try:
            deadline.check(section)
            return build()
        except DeadlineExceededError as exc:
            reason = (
                "report cancelled" if isinstance(exc, ReportCancelledError)
                else "report deadline exceeded"
            )
            logger.warning("report_section_skipped", extra={
                "section": section,
                "stage": exc.stage,
                "elapsed_seconds": round(exc.elapsed_seconds, 3),
                "budget_seconds": exc.budget_seconds,
                "exc_code": exc.code,
            })
            notes.append(f"{section} section skipped: {reason}")
            return placeholder
        except Exception as exc:
            error = SectionBuildError(section, exc)
            logger.warning("report_section_failed", exc_info=exc, extra={
                "section": section,
                "exc_code": error.code,
                "cause_type": error.cause_type,
            })
            notes.append(str(error))
            return placeholder

    # -----------------------------------------------------------------
    # Sections
    # -----------------------------------------------------------------

    def _snapshot_section(
        self,
        inputs: _RequestInputs,
        notes: list[str],
    ) -> dict[str, Any]:
        snapshot = inputs.snapshot()
        totals = self._reconciliation.check_snapshot_totals(snapshot)
        payload = serialize_snapshot(snapshot, totals, self._config.quantity_places)
        if totals.note:
            notes.append(totals.note)
        return payload

    def _reconciliation_section(
        self,
        product: ProductInfo,
        inputs: _RequestInputs,
        notes: list[str],
    ) -> dict[str, Any]:
        movements = inputs.ledger()
        snapshot = inputs.snapshot()

        expected = self._aggregator.aggregate(movements=movements)
        result = self._reconciliation.compare(expected=expected, snapshot=snapshot)
        integrity = self._integrity.check(
            movements=movements,
            batch_tracked=product.batch_tracking_enabled,
        )

        section_notes = list(result.notes) + list(integrity.notes)
        payload = serialize_reconciliation(
            expected, result, section_notes, self._config.quantity_places,
        )
        notes.extend(section_notes)
        return payload
