# src/utilization_core/viewmodel.py
"""
ViewModel computation for the utilization overview.

NO STREAMLIT IMPORTS ALLOWED IN THIS MODULE.

This module contains the pure-function logic for composing the pipeline,
statistics and classification into the data the rendering layer consumes.
The ViewModel is never stored; it's computed fresh after every state
change.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import AbstractSet, Optional, Sequence

from .classify import classify_record
from .config import OverviewConfig
from .model import (
    AnyViewModel,
    EmptyViewModel,
    FilterMode,
    RowView,
    SortMode,
    UtilizationRecord,
    ViewModel,
)
from .pipeline import derive_view, visible_keys
from .selection import SelectionTracker
from .statistics import (
    aggregate_stats,
    per_row_overage_percent,
    per_row_utilization_rate_percent,
    selection_totals,
)

logger = logging.getLogger(__name__)


def resolve_currency(
    records: Sequence[UtilizationRecord],
    default_currency: str,
) -> str:
    """Currency of the first record, or the configured default."""
    if records and records[0].currency_code:
        return records[0].currency_code
    return default_currency


def build_row_view(record: UtilizationRecord, selection: AbstractSet[str]) -> RowView:
    """Attach derived per-row fields to a visible record."""
    row_key = record.row_key
    return RowView(
        record=record,
        row_key=row_key,
        overage_percent=per_row_overage_percent(record),
        utilization_rate_percent=per_row_utilization_rate_percent(record),
        severity=classify_record(record),
        is_selected=row_key in selection,
    )


def derive_view_model(
    records: Optional[Sequence[UtilizationRecord]],
    filter_mode: FilterMode,
    sort_mode: SortMode,
    selection: SelectionTracker | AbstractSet[str],
    *,
    config: Optional[OverviewConfig] = None,
    as_of: Optional[datetime] = None,
) -> AnyViewModel:
    """
    Compute the full view model from a snapshot of state.

    This function is PURE - it reads state but NEVER writes. Call it after
    every mutating operation (filter, sort, toggle, select-all, clear).

    Args:
        records: Input records in delivery order, or None
        filter_mode: Current filter mode
        sort_mode: Current sort mode
        selection: SelectionTracker or a set of selected RowKeys
        config: Optional config (default currency)
        as_of: Optional snapshot timestamp passed through for display

    Returns:
        EmptyViewModel when records is None or empty, ViewModel otherwise
    """
    if config is None:
        config = OverviewConfig()

    if not records:
        return EmptyViewModel(filter_mode=filter_mode, sort_mode=sort_mode, as_of=as_of)

    if not isinstance(selection, SelectionTracker):
        selection = SelectionTracker(selection)
    selected = selection.keys

    visible = derive_view(records, filter_mode, sort_mode)
    all_visible_selected = selection.is_all_visible_selected(visible_keys(visible))

    view_model = ViewModel(
        rows=tuple(build_row_view(r, selected) for r in visible),
        aggregate=aggregate_stats(records),
        selection_totals=selection_totals(visible, selected),
        all_visible_selected=all_visible_selected,
        currency_code=resolve_currency(records, config.default_currency),
        filter_mode=filter_mode,
        sort_mode=sort_mode,
        total_count=len(records),
        as_of=as_of,
        selected_count=len(selected),
    )

    logger.debug(
        "view model recomputed: visible=%d total=%d selected=%d filter=%s sort=%s",
        view_model.visible_count,
        view_model.total_count,
        view_model.selected_count,
        filter_mode.value,
        sort_mode.value,
    )
    return view_model
