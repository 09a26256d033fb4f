"""
Ports for the external collaborators of the reconciliation report.

Responsibility:
    Typed contracts for the three read-only collaborators the report
    depends on: the movement ledger, the balance snapshot and the product
    catalog.  The SQLAlchemy selectors in ``stock_kernel.selectors``
    implement them; tests use in-memory fakes.

Architecture position:
    Kernel > Domain.  Protocols only, no implementations.

Invariants enforced:
    - MovementStore paging: ``cursor`` means "id strictly less than cursor";
      ``next_cursor`` is set only when the page came back full.
    - MovementOrder.DATE_DESC (date desc, id desc) is for display only.  A
      walk over the whole ledger pages in MovementOrder.ID_DESC, where the id
      cursor visits every row exactly once.
    - Nothing behind these ports is ever written by the report.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable

from stock_kernel.domain.balances import StockSnapshot
from stock_kernel.domain.movement import Movement
from stock_kernel.domain.product import ProductInfo


class MovementOrder(str, Enum):
    """Row order for MovementStore.fetch."""

    DATE_DESC = "date_desc"
    ID_DESC = "id_desc"


@dataclass(frozen=True)
class MovementPage:
    """One page of the ledger, newest first."""

    movements: tuple[Movement, ...] = ()
    next_cursor: int | None = None

    @property
    def has_more(self) -> bool:
        return self.next_cursor is not None

    @classmethod
    def from_rows(cls, movements: tuple[Movement, ...], limit: int) -> MovementPage:
        """Build a page, deriving ``next_cursor`` from a full page."""
        next_cursor = None
        if movements and len(movements) >= limit:
            next_cursor = movements[-1].id
        return cls(movements=movements, next_cursor=next_cursor)


@runtime_checkable
class MovementStore(Protocol):
    """Supplies movement headers with their lines, paged by descending id."""

    def fetch(
        self,
        product_id: int,
        cursor: int | None = None,
        limit: int = 200,
        order: MovementOrder = MovementOrder.DATE_DESC,
    ) -> MovementPage:
        ...


@runtime_checkable
class SnapshotProvider(Protocol):
    """Supplies the cached balance view; ``None`` means unavailable."""

    def get(self, product_id: int) -> StockSnapshot | None:
        ...


@runtime_checkable
class ProductCatalog(Protocol):
    """Supplies product headers; ``None`` means unknown product."""

    def get_product(self, product_id: int) -> ProductInfo | None:
        ...
