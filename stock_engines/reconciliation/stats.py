"""Movement counts by type for the ledger summary."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from types import MappingProxyType

from stock_kernel.domain.movement import Movement
from stock_engines.tracer import traced_engine

from stock_engines.reconciliation.recon_types import MovementStats


@traced_engine("movement_stats", "1.0", fingerprint_fields=("movements",))
def summarize_movement_types(movements: Iterable[Movement]) -> MovementStats:
    """Count movements per ``lower(trim(type or 'unknown'))`` label.

    ``rendered_movements`` is left at zero; the caller fills it with the
    size of the page it renders.
    """
    counts: Counter[str] = Counter()
    for movement in movements:
        counts[movement.type_label] += 1
    return MovementStats(
        total_movements=sum(counts.values()),
        rendered_movements=0,
        types=MappingProxyType(dict(sorted(counts.items()))),
    )
