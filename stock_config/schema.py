"""
Reconciliation Report Configuration Schema.

Defines the structure and defaults for the product stock report.  Actual
values come from a YAML file at runtime (see ``stock_config.loader``).
"""

from dataclasses import dataclass, fields
from decimal import Decimal, InvalidOperation
from typing import Any, Self

from stock_kernel.exceptions import InvalidConfigError
from stock_kernel.logging_config import get_logger

logger = get_logger("config.schema")

# Hard bounds of the movement paging contract.
PAGE_SIZE_FLOOR = 1
PAGE_SIZE_CEILING = 2000


@dataclass(frozen=True)
class ReconciliationConfig:
    """
    Configuration schema for the product stock reconciliation report.

    Override at instantiation:

        config = ReconciliationConfig(default_page_size=500, deadline_seconds=5)
    """

    # Ledger paging
    default_page_size: int = 200
    min_page_size: int = PAGE_SIZE_FLOOR
    max_page_size: int = PAGE_SIZE_CEILING

    # Quantities
    quantity_places: int = 4
    totals_tolerance: Decimal = Decimal("0")

    # Report assembly
    deadline_seconds: float | None = None  # None = no time limit
    include_snapshot: bool = True
    include_ledger: bool = True
    include_reconciliation: bool = True
    report_version: str = "1"

    def __post_init__(self):
        if self.min_page_size < PAGE_SIZE_FLOOR:
            raise InvalidConfigError(
                "min_page_size", self.min_page_size, f"must be >= {PAGE_SIZE_FLOOR}",
            )
        if self.max_page_size > PAGE_SIZE_CEILING:
            raise InvalidConfigError(
                "max_page_size", self.max_page_size, f"must be <= {PAGE_SIZE_CEILING}",
            )
        if self.min_page_size > self.max_page_size:
            raise InvalidConfigError(
                "min_page_size", self.min_page_size, "cannot exceed max_page_size",
            )
        if not self.min_page_size <= self.default_page_size <= self.max_page_size:
            raise InvalidConfigError(
                "default_page_size",
                self.default_page_size,
                f"must be within [{self.min_page_size}, {self.max_page_size}]",
            )

        if self.quantity_places < 0:
            raise InvalidConfigError(
                "quantity_places", self.quantity_places, "cannot be negative",
            )
        if self.totals_tolerance < 0:
            raise InvalidConfigError(
                "totals_tolerance", self.totals_tolerance, "cannot be negative",
            )
        if self.deadline_seconds is not None and self.deadline_seconds <= 0:
            raise InvalidConfigError(
                "deadline_seconds", self.deadline_seconds, "must be positive",
            )
        if not self.report_version:
            raise InvalidConfigError(
                "report_version", self.report_version, "cannot be empty",
            )

        logger.debug(
            "reconciliation_config_initialized",
            extra={
                "default_page_size": self.default_page_size,
                "max_page_size": self.max_page_size,
                "quantity_places": self.quantity_places,
                "deadline_seconds": self.deadline_seconds,
                "report_version": self.report_version,
            },
        )

    @classmethod
    def with_defaults(cls) -> Self:
        """Create config with the standard defaults."""
        logger.info("reconciliation_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create config from a dictionary (e.g., parsed from YAML)."""
        logger.info(
            "reconciliation_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise InvalidConfigError(unknown[0], data[unknown[0]], "unknown setting")

        values = dict(data)
        if "totals_tolerance" in values:
            raw = values["totals_tolerance"]
            try:
                values["totals_tolerance"] = Decimal(str(raw))
            except InvalidOperation:
                raise InvalidConfigError(
                    "totals_tolerance", raw, "must be a number",
                ) from None
        if values.get("report_version") is not None:
            values["report_version"] = str(values["report_version"])
        return cls(**values)
