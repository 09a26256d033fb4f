"""
stock_services -- Package init and public API.

Responsibility:
    The imperative shell: composes the pure engines (stock_engines/) with
    the kernel's ports and SQLAlchemy selectors into the product stock
    reconciliation report.

Architecture position:
    Services -- orchestration over engines + kernel.

    Dependency direction (enforced by tests/architecture/test_layer_boundaries.py):
        stock_services/ -> stock_engines/  (allowed)
        stock_services/ -> stock_kernel/   (allowed)
        stock_engines/  -> stock_services/ (FORBIDDEN)
        stock_kernel/   -> stock_services/ (FORBIDDEN)
"""

from stock_kernel.logging_config import get_logger

logger = get_logger("services")

from stock_services.report_service import ProductStockReportService, ReportParams

__all__ = [
    "ProductStockReportService",
    "ReportParams",
]
