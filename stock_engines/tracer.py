"""
stock_engines.tracer -- STOCK_ENGINE_TRACE records for pure engine calls.

Responsibility:
    ``@traced_engine`` wraps an engine entry point and emits one INFO record
    per call carrying the engine name and version, a fingerprint of the
    selected keyword inputs, and the call duration.  Two reports built from
    the same ledger show the same fingerprint, which is how drift between
    runs is told apart from drift in the data.

Architecture position:
    Engines -- support for the pure calculation layer.  Emits a log record
    only; inputs are read, never modified.

Invariants enforced:
    - The fingerprint is a 16-hex-char SHA-256 prefix over a canonical
      rendering: mappings by sorted key, sequences in order, dataclasses by
      ``repr``.  A field that was not passed renders as ``null``.
    - Fingerprinting is skipped when INFO is disabled for the tracer logger.

Usage:
    @traced_engine("ledger_aggregator", "1.0", fingerprint_fields=("movements",))
    def aggregate(self, movements):
        ...

Only keyword arguments are fingerprinted, so engines are called with
keywords (``aggregate(movements=...)``).
"""

from __future__ import annotations

import dataclasses
import functools
import hashlib
import logging
import time
from collections.abc import Callable, Mapping
from decimal import Decimal
from typing import Any

_logger = logging.getLogger("stock_kernel.engines.tracer")

TRACE_TYPE = "STOCK_ENGINE_TRACE"


def _canonical(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, (str, bool, int, float, Decimal)):
        return str(value)
    if isinstance(value, Mapping):
        body = ",".join(
            f"{key}:{_canonical(item)}"
            for key, item in sorted(value.items(), key=lambda kv: str(kv[0]))
        )
        return "{" + body + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_canonical(item) for item in value) + "]"
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return repr(value)
    return str(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    kwargs: Mapping[str, Any],
) -> str:
    digest = hashlib.sha256()
    for position, name in enumerate(fingerprint_fields):
        if position:
            digest.update(b"|")
        digest.update(f"{name}={_canonical(kwargs.get(name))}".encode())
    return digest.hexdigest()[:16]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """Decorate an engine entry point with STOCK_ENGINE_TRACE logging."""

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            enabled = _logger.isEnabledFor(logging.INFO)
            fingerprint = (
                compute_input_fingerprint(fingerprint_fields, kwargs)
                if enabled and fingerprint_fields else ""
            )
            started = time.perf_counter()
            result = func(*args, **kwargs)
            if enabled:
                _logger.info(TRACE_TYPE, extra={
                    "trace_type": TRACE_TYPE,
                    "engine_name": engine_name,
                    "engine_version": engine_version,
                    "input_fingerprint": fingerprint,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                    "function": func.__qualname__,
                })
            return result

        return wrapper

    return decorator
