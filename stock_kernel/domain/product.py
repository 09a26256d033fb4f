"""Product metadata passed through to the report header."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ProductInfo:
    """Read-only product header used by the report.

    ``batch_tracking_enabled`` decides whether header-only movements are
    worth a warning.
    """

    id: int
    sku: str = ""
    name: str = ""
    type: str = ""
    stock_tracking_enabled: bool = False
    batch_tracking_enabled: bool = False
