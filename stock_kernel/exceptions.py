"""
Typed Exception Hierarchy for the Stock Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

The reconciliation report is decision support, not a correctness gate, so
almost nothing in this package is allowed to raise at the caller.  The few
errors that do exist travel *inside* the report pipeline: a section build
fails, a deadline expires, a configuration file is wrong.  The assembler
catches them by type and turns them into notes, so every error carries:

  1. a TYPED exception class (catch by type, not message)
  2. a CODE attribute (machine-readable, logged as ``exc_code``)
  3. structured DATA as attributes (logged as ``exc_<attr>``)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    StockKernelError (base)
    |
    +-- ReportError
    |   +-- ProductNotFoundError
    |   +-- SectionBuildError
    |   +-- DeadlineExceededError
    |       +-- ReportCancelledError
    |
    +-- LedgerError
    |   +-- InvalidMovementError
    |
    +-- ConfigError
        +-- InvalidConfigError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Report          | PRODUCT_NOT_FOUND           | The requested product does not exist
                | SECTION_BUILD_FAILED        | One report section raised while building
                | DEADLINE_EXCEEDED           | Caller's time budget ran out
                | REPORT_CANCELLED            | Caller cancelled the report explicitly
----------------|-----------------------------|-----------------------------------------
Ledger          | LEDGER_ERROR                | Ledger paging did not advance
                | INVALID_MOVEMENT            | A non-Movement object reached an engine
----------------|-----------------------------|-----------------------------------------
Config          | INVALID_CONFIG              | A configuration value failed validation

===============================================================================
HANDLING PATTERNS
===============================================================================

    try:
        payload = build_section()
    except DeadlineExceededError as e:
        notes.append(f"{section} section skipped: report deadline exceeded")
    except Exception as e:
        error = SectionBuildError(section, e)
        logger.warning("report_section_failed", exc_info=error)
"""


class StockKernelError(Exception):
    """
    Base exception for all stock kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "STOCK_KERNEL_ERROR"


# Report assembly exceptions


class ReportError(StockKernelError):
    """Base exception for report assembly errors."""

    code: str = "REPORT_ERROR"


class ProductNotFoundError(ReportError):
    """The requested product does not exist in the catalog."""

    code: str = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: object):
        self.product_id = product_id
        super().__init__(f"Product not found: {product_id}")


class SectionBuildError(ReportError):
    """A single report section could not be built.

    Wraps the original exception so the section name and cause type survive
    into structured logs.
    """

    code: str = "SECTION_BUILD_FAILED"

    def __init__(self, section: str, cause: BaseException):
        self.section = section
        self.cause_type = type(cause).__name__
        self.cause_message = str(cause)
        super().__init__(
            f"{section} section unavailable: {self.cause_type}: {self.cause_message}"
        )


class DeadlineExceededError(ReportError):
    """The caller's deadline expired before a stage could start."""

    code: str = "DEADLINE_EXCEEDED"

    def __init__(self, stage: str, elapsed_seconds: float, budget_seconds: float | None):
        self.stage = stage
        self.elapsed_seconds = elapsed_seconds
        self.budget_seconds = budget_seconds
        super().__init__(
            f"Deadline exceeded before {stage}: "
            f"elapsed {elapsed_seconds:.3f}s of {budget_seconds}s"
        )


class ReportCancelledError(DeadlineExceededError):
    """The caller cancelled the report before a stage could start."""

    code: str = "REPORT_CANCELLED"

    def __init__(self, stage: str, elapsed_seconds: float):
        super().__init__(stage, elapsed_seconds, None)
        self.args = (f"Report cancelled before {stage}",)


# Ledger exceptions


class LedgerError(StockKernelError):
    """Base exception for ledger input errors."""

    code: str = "LEDGER_ERROR"


class InvalidMovementError(LedgerError):
    """An engine received something that is not a Movement.

    Dirty column values never raise (they are coerced on read); this is a
    programming error at the call site.
    """

    code: str = "INVALID_MOVEMENT"

    def __init__(self, value: object):
        self.value_type = type(value).__name__
        super().__init__(f"Expected Movement, got {self.value_type}")


# Configuration exceptions


class ConfigError(StockKernelError):
    """Base exception for configuration errors."""

    code: str = "CONFIG_ERROR"


class InvalidConfigError(ConfigError):
    """A configuration field failed validation."""

    code: str = "INVALID_CONFIG"

    def __init__(self, field: str, value: object, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid config {field}={value!r}: {reason}")
