"""
Module: stock_kernel.selectors.movement_selector
Responsibility: Read-only access to the movement ledger and product headers.
    Implements the MovementStore and ProductCatalog ports.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Paging contract: rows ordered by (date desc, id desc) for display or by
      id desc for full-ledger walks; ``cursor`` means "id strictly less than
      cursor"; page size clamped to [MIN_PAGE_SIZE, MAX_PAGE_SIZE];
      ``next_cursor`` only on a full page.
    - Dirty columns never raise: quantities coerce to 0, ids to None, unknown
      types to MovementType.UNKNOWN.

Failure modes:
    - SQLAlchemyError propagates to the caller (the report assembler turns it
      into a degraded section).
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from stock_kernel.domain.movement import Movement, MovementLine, MovementType, ReasonRef
from stock_kernel.domain.ports import MovementOrder, MovementPage
from stock_kernel.domain.product import ProductInfo
from stock_kernel.domain.quantities import coerce_id, coerce_quantity
from stock_kernel.logging_config import get_logger
from stock_kernel.models.movement import ProductMovementLineModel, ProductMovementModel
from stock_kernel.models.product import ProductModel
from stock_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.movement")

MIN_PAGE_SIZE = 1
MAX_PAGE_SIZE = 2000
DEFAULT_PAGE_SIZE = 200


def clamp_page_size(
    limit: object,
    default: int = DEFAULT_PAGE_SIZE,
    minimum: int = MIN_PAGE_SIZE,
    maximum: int = MAX_PAGE_SIZE,
) -> int:
    """Clamp a raw page size into [minimum, maximum]; non-numeric => default."""
    value = coerce_id(limit)
    if value is None:
        return default
    return min(max(value, minimum), maximum)


def movement_from_row(row: ProductMovementModel) -> Movement:
    """Convert an ORM movement (with loaded lines) into a domain Movement."""
    lines = tuple(
        MovementLine(
            id=line.id,
            movement_id=line.movement_id,
            batch_id=coerce_id(line.batch_id),
            quantity=coerce_quantity(line.quantity),
            batch_code=line.batch.display_code if line.batch is not None else None,
            notes=line.notes,
        )
        for line in row.lines
    )
    return Movement(
        id=row.id,
        movement_type=MovementType.parse(row.movement_type),
        movement_type_raw=row.movement_type,
        product_id=row.product_id,
        date=row.date,
        location_in_id=coerce_id(row.location_in_id),
        location_out_id=coerce_id(row.location_out_id),
        quantity=coerce_quantity(row.quantity),
        reason=ReasonRef.resolve(
            assembly_activity_id=row.assembly_activity_id,
            assembly_id=row.assembly_id,
            job_id=row.job_id,
            purchase_order_line_id=row.purchase_order_line_id,
            shipping_line_id=row.shipping_line_id,
            expense_id=row.expense_id,
            costing_id=row.costing_id,
        ),
        lines=lines,
        created_by=row.created_by,
        notes=row.notes,
    )


class MovementSelector(BaseSelector):
    """
    Selector for the movement ledger.

    Contract:
        ``fetch()`` returns one page of movements with their lines eagerly
        loaded, newest first.  ``MovementOrder.ID_DESC`` sorts on id alone so
        that the id cursor pages through every row once, whatever the dates.
    """

    def __init__(self, session: Session, max_page_size: int = MAX_PAGE_SIZE):
        super().__init__(session)
        self._max_page_size = max_page_size

    def fetch(
        self,
        product_id: int,
        cursor: int | None = None,
        limit: int = DEFAULT_PAGE_SIZE,
        order: MovementOrder = MovementOrder.DATE_DESC,
    ) -> MovementPage:
        page_size = clamp_page_size(limit, maximum=self._max_page_size)

        stmt = (
            select(ProductMovementModel)
            .where(ProductMovementModel.product_id == product_id)
            .options(
                selectinload(ProductMovementModel.lines)
                .selectinload(ProductMovementLineModel.batch)
            )
        )
        if cursor is not None:
            stmt = stmt.where(ProductMovementModel.id < cursor)
        if order == MovementOrder.ID_DESC:
            stmt = stmt.order_by(ProductMovementModel.id.desc())
        else:
            stmt = stmt.order_by(
                ProductMovementModel.date.desc().nulls_last(),
                ProductMovementModel.id.desc(),
            )
        stmt = stmt.limit(page_size)

        rows = self.session.scalars(stmt).all()
        movements = tuple(movement_from_row(row) for row in rows)

        logger.debug(
            "movement_page_fetched",
            extra={
                "product_id": product_id,
                "cursor": cursor,
                "limit": page_size,
                "order": order.value,
                "rows": len(movements),
            },
        )
        return MovementPage.from_rows(movements, page_size)


class ProductSelector(BaseSelector):
    """Selector for product headers (ProductCatalog port)."""

    def get_product(self, product_id: int) -> ProductInfo | None:
        row = self.session.get(ProductModel, product_id)
        if row is None:
            return None
        return ProductInfo(
            id=row.id,
            sku=row.sku or "",
            name=row.name or "",
            type=row.type or "",
            stock_tracking_enabled=bool(row.stock_tracking_enabled),
            batch_tracking_enabled=bool(row.batch_tracking_enabled),
        )
