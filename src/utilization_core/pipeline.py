# src/utilization_core/pipeline.py
"""
Filter/sort pipeline producing the visible ordered sequence of records.

NO STREAMLIT IMPORTS ALLOWED IN THIS MODULE.

The pipeline never mutates its input; every call returns a new tuple.
Sorting relies on sorted(), which is stable with reverse=True as well, so
records with equal sort keys keep their relative input order.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Callable, Dict, Iterable, Optional, Sequence, Tuple

from .model import FilterMode, SortMode, UtilizationRecord

SortKey = Callable[[UtilizationRecord], Decimal]

# INPUT_ORDER has no key: filtered order is kept as-is
SORT_KEYS: Dict[SortMode, Optional[SortKey]] = {
    SortMode.INPUT_ORDER: None,
    SortMode.AUTHORIZED_AMOUNT_DESC: lambda r: r.authorized_amount,
    SortMode.OVERAGE_DESC: lambda r: r.overage_amount,
}


def filter_records(
    records: Iterable[UtilizationRecord],
    filter_mode: FilterMode,
) -> Tuple[UtilizationRecord, ...]:
    """Apply the filter mode. OVERUSED_ONLY keeps records with overage_amount > 0."""
    if filter_mode == FilterMode.ALL:
        return tuple(records)
    if filter_mode == FilterMode.OVERUSED_ONLY:
        return tuple(r for r in records if r.is_overused)
    raise ValueError(f"Unknown filter mode: {filter_mode!r}")


def sort_records(
    records: Sequence[UtilizationRecord],
    sort_mode: SortMode,
) -> Tuple[UtilizationRecord, ...]:
    """Apply the sort mode (descending, stable)."""
    if sort_mode not in SORT_KEYS:
        raise ValueError(f"Unknown sort mode: {sort_mode!r}")
    key = SORT_KEYS[sort_mode]
    if key is None:
        return tuple(records)
    return tuple(sorted(records, key=key, reverse=True))


def derive_view(
    records: Optional[Iterable[UtilizationRecord]],
    filter_mode: FilterMode,
    sort_mode: SortMode,
) -> Tuple[UtilizationRecord, ...]:
    """
    Produce the ordered view of records for a filter and sort mode.

    Args:
        records: Input records in delivery order (None is treated as empty)
        filter_mode: Which records are visible
        sort_mode: How visible records are ordered

    Returns:
        New tuple of visible records in display order
    """
    if records is None:
        return ()
    return sort_records(filter_records(records, filter_mode), sort_mode)


def visible_keys(visible_records: Iterable[UtilizationRecord]) -> Tuple[str, ...]:
    """RowKeys of the visible records, in display order."""
    return tuple(r.row_key for r in visible_records)
