"""
Pytest fixtures for the stock reconciliation test suite.

Provides:
- Structured logging configured once per session, plus ``captured_logs``
- Domain object builders for movements, lines and snapshots
- In-memory fakes for the three ports (catalog, movement store, snapshot)
- An in-memory SQLite session with all tables created

SQLite is used for the selector and end-to-end tests; the selectors only
use portable SQL, so the same code runs against PostgreSQL through
``DATABASE_URL``.
"""

import json
import logging
import os
from collections.abc import Generator
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from io import StringIO

import pytest
from sqlalchemy.orm import Session

from stock_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from stock_kernel.domain.balances import (
    SnapshotBatchRow,
    SnapshotLocationRow,
    StockSnapshot,
)
from stock_kernel.domain.clock import DeterministicClock
from stock_kernel.domain.movement import Movement, MovementLine, MovementType, ReasonRef
from stock_kernel.domain.ports import MovementOrder, MovementPage
from stock_kernel.domain.product import ProductInfo
from stock_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

TEST_DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///:memory:")

BASE_DATE = datetime(2024, 1, 1, 8, 0, 0, tzinfo=timezone.utc)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture stock_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            service.build_report(1)
            logs = captured_logs()
            assert any(r["message"] == "report_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("stock_kernel")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


# =============================================================================
# Domain builders
# =============================================================================


def make_line(
    batch_id: int | None = None,
    quantity: str | int = "0",
    line_id: int | None = None,
    movement_id: int | None = None,
    batch_code: str | None = None,
) -> MovementLine:
    return MovementLine(
        id=line_id,
        movement_id=movement_id,
        batch_id=batch_id,
        quantity=Decimal(str(quantity)),
        batch_code=batch_code,
    )


def make_movement(
    movement_id: int,
    movement_type: MovementType | str = MovementType.TRANSFER,
    *,
    location_in: int | None = None,
    location_out: int | None = None,
    quantity: str | int = "0",
    lines: tuple[MovementLine, ...] = (),
    date: datetime | None = None,
    product_id: int = 1,
    reason: ReasonRef | None = None,
) -> Movement:
    if isinstance(movement_type, MovementType):
        parsed, raw = movement_type, movement_type.value
    else:
        parsed, raw = MovementType.parse(movement_type), movement_type
    return Movement(
        id=movement_id,
        movement_type=parsed,
        movement_type_raw=raw,
        product_id=product_id,
        date=date or BASE_DATE + timedelta(minutes=movement_id),
        location_in_id=location_in,
        location_out_id=location_out,
        quantity=Decimal(str(quantity)),
        reason=reason or ReasonRef.none(),
        lines=lines,
    )


def make_snapshot(
    by_location: dict[int | None, str | int],
    by_location_batch: dict[tuple[int | None, int | None], str | int] | None = None,
    total: str | int | None = None,
    product_id: int = 1,
) -> StockSnapshot:
    loc_rows = tuple(
        SnapshotLocationRow(location_id=loc, qty=Decimal(str(qty)), location_name=f"LOC-{loc}")
        for loc, qty in by_location.items()
    )
    batch_rows = tuple(
        SnapshotBatchRow(location_id=loc, batch_id=batch, qty=Decimal(str(qty)))
        for (loc, batch), qty in (by_location_batch or {}).items()
    )
    if total is None:
        total_qty = sum((row.qty for row in loc_rows), Decimal("0"))
    else:
        total_qty = Decimal(str(total))
    return StockSnapshot(
        product_id=product_id,
        total=total_qty,
        by_location=loc_rows,
        by_location_batch=batch_rows,
    )


@pytest.fixture
def scenario_movements() -> tuple[Movement, ...]:
    """Movement A (transfer 1 -> 2, qty 5) + Movement B (adjust_in at 1, batch 7 qty 3)."""
    return (
        make_movement(1, MovementType.TRANSFER, location_in=2, location_out=1, quantity=5),
        make_movement(
            2, MovementType.ADJUST_IN, location_in=1, quantity=3,
            lines=(make_line(batch_id=7, quantity=3, line_id=10, movement_id=2),),
        ),
    )


# =============================================================================
# Port fakes
# =============================================================================


class FakeCatalog:
    def __init__(self, *products: ProductInfo):
        self._products = {p.id: p for p in products}

    def get_product(self, product_id: int) -> ProductInfo | None:
        return self._products.get(product_id)


class FakeMovementStore:
    """In-memory MovementStore honouring both paging orders.

    Undated movements sort last in date order, as NULLS LAST does in SQL.
    """

    def __init__(self, movements=(), fail_with: Exception | None = None):
        self.movements = tuple(movements)
        self.fail_with = fail_with
        self.calls: list[tuple[int, int | None, int]] = []
        self.orders: list[MovementOrder] = []

    def fetch(
        self,
        product_id: int,
        cursor: int | None = None,
        limit: int = 200,
        order: MovementOrder = MovementOrder.DATE_DESC,
    ) -> MovementPage:
        self.calls.append((product_id, cursor, limit))
        self.orders.append(order)
        if self.fail_with is not None:
            raise self.fail_with
        rows = [
            m for m in self.movements
            if m.product_id == product_id and (cursor is None or m.id < cursor)
        ]
        if order == MovementOrder.ID_DESC:
            rows.sort(key=lambda m: m.id, reverse=True)
        else:
            rows.sort(key=lambda m: (m.date is not None, m.date or BASE_DATE, m.id), reverse=True)
        return MovementPage.from_rows(tuple(rows[:limit]), limit)


class FakeSnapshotProvider:
    def __init__(self, snapshot: StockSnapshot | None = None, fail_with: Exception | None = None):
        self.snapshot = snapshot
        self.fail_with = fail_with
        self.calls = 0

    def get(self, product_id: int) -> StockSnapshot | None:
        self.calls += 1
        if self.fail_with is not None:
            raise self.fail_with
        return self.snapshot


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    return DeterministicClock()


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    """Fresh database with all tables, torn down after the test."""
    init_engine_from_url(TEST_DATABASE_URL)
    create_tables()
    session = get_session()
    try:
        yield session
    finally:
        session.close()
        drop_tables()
        reset_engine()
