# src/utilization_core/statistics.py
"""
Per-row and aggregate statistics for authorization lines.

NO STREAMLIT IMPORTS ALLOWED IN THIS MODULE.

All divisions are guarded: a zero denominator yields Decimal(0), never a
ZeroDivisionError, NaN or Infinity.
"""
from __future__ import annotations

from decimal import Decimal
from typing import AbstractSet, Iterable, Sequence

from .model import ZERO, AggregateStats, SelectionTotals, UtilizationRecord

HUNDRED = Decimal(100)


def _percent_of(numerator: Decimal, denominator: Decimal) -> Decimal:
    if denominator == 0:
        return ZERO
    return numerator / denominator * HUNDRED


def per_row_overage_percent(record: UtilizationRecord) -> Decimal:
    """Overage as a percentage of the authorized amount. Unbounded above."""
    return _percent_of(record.overage_amount, record.authorized_amount)


def per_row_utilization_rate_percent(record: UtilizationRecord) -> Decimal:
    """Used amount as a percentage of the authorized amount; may exceed 100."""
    return _percent_of(record.used_amount, record.authorized_amount)


def aggregate_stats(records: Iterable[UtilizationRecord]) -> AggregateStats:
    """
    Compute portfolio-wide statistics.

    Always called with the FULL input set; the current filter has no
    bearing on these figures.

    Args:
        records: All input records

    Returns:
        AggregateStats with totals, overused count and utilization rate
    """
    total_authorized = ZERO
    total_used = ZERO
    total_overage = ZERO
    overused_count = 0
    total_accounts = 0

    for record in records:
        total_authorized += record.authorized_amount
        total_used += record.used_amount
        total_overage += record.overage_amount
        if record.is_overused:
            overused_count += 1
        total_accounts += 1

    return AggregateStats(
        total_authorized=total_authorized,
        total_used=total_used,
        total_overage=total_overage,
        overused_count=overused_count,
        utilization_rate_percent=_percent_of(total_used, total_authorized),
        total_accounts=total_accounts,
    )


def selection_totals(
    visible_records: Sequence[UtilizationRecord],
    selection: AbstractSet[str],
) -> SelectionTotals:
    """
    Sum the records that are both visible and selected.

    A key that is selected but filtered out of the current view stays in
    the selection set and is still excluded here.

    Args:
        visible_records: Pipeline output (post filter/sort)
        selection: Selected RowKeys

    Returns:
        SelectionTotals over visible ∩ selected
    """
    total_authorized = ZERO
    total_used = ZERO
    total_overage = ZERO
    count = 0

    for record in visible_records:
        if record.row_key not in selection:
            continue
        total_authorized += record.authorized_amount
        total_used += record.used_amount
        total_overage += record.overage_amount
        count += 1

    return SelectionTotals(
        total_authorized=total_authorized,
        total_used=total_used,
        total_overage=total_overage,
        count=count,
    )
