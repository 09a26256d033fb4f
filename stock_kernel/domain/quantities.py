"""
Quantity and identifier coercion for ledger data.

Responsibility:
    The single sanctioned place where raw ledger values (numbers, strings,
    None, legacy garbage) become ``Decimal`` quantities and nullable integer
    ids, and the only rounding helper used by the reconciliation engines.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Quantities are always ``Decimal``; floats are converted through
      ``str()`` so binary noise never enters accumulation.
    - Dirty quantities coerce to ``Decimal("0")``; they never raise.
    - Malformed identifiers coerce to ``None`` (the "no location" /
      "no batch" grouping key); they never raise.
    - ``round_qty`` is the ONLY rounding function for quantities.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

QUANTITY_DECIMAL_PLACES = 4
DEFAULT_ROUNDING = ROUND_HALF_UP

ZERO = Decimal("0")


def coerce_quantity(value: Any) -> Decimal:
    """Turn a raw quantity into a finite Decimal, defaulting to zero.

    Accepts Decimal, int, float and numeric strings.  None, booleans,
    non-numeric strings, NaN and infinities all become ``Decimal("0")``.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, (float, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            return ZERO
    else:
        return ZERO
    if not result.is_finite():
        return ZERO
    return result


def coerce_id(value: Any) -> int | None:
    """Turn a raw identifier into an int, or None when missing/malformed."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            return None
    return None


def round_qty(
    value: Decimal,
    decimal_places: int = QUANTITY_DECIMAL_PLACES,
    rounding: str = DEFAULT_ROUNDING,
) -> Decimal:
    """Round a quantity to ``decimal_places`` (default 4).

    Preconditions: value is a Decimal.
    Postconditions: Returns value quantized with the given rounding mode.
    """
    quantize_str = "0." + "0" * decimal_places if decimal_places > 0 else "1"
    return value.quantize(Decimal(quantize_str), rounding=rounding)
