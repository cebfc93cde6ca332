# src/utilization_core/export.py
"""
Selection export for the utilization overview.

NO STREAMLIT IMPORTS ALLOWED IN THIS MODULE.

Exports cover rows that are selected AND currently visible, the same set
the selection totals are computed over. Amounts are written raw (Decimal
as text); formatting for display is the rendering layer's job.
"""
from __future__ import annotations

import csv
import io
from datetime import datetime
from typing import Any, Dict, List, Optional

from .model import AnyViewModel, round_half_up

EXPORT_COLUMNS = [
    'account_number',
    'authorization_number',
    'product_name',
    'product_family',
    'currency_code',
    'authorized_amount',
    'used_amount',
    'overage_amount',
    'utilization_rate_percent',
    'overage_percent',
    'severity',
]

# Percentages are rounded for export only; the ViewModel keeps full precision
PERCENT_PLACES = 2


def _percent_text(value) -> str:
    return str(round_half_up(value, PERCENT_PLACES))


def build_selection_rows(view_model: AnyViewModel) -> List[Dict[str, Any]]:
    """
    Selected visible rows as plain dicts keyed by EXPORT_COLUMNS.

    Returns an empty list for the empty variant.
    """
    if view_model.is_empty:
        return []

    rows = []
    for row in view_model.rows:
        if not row.is_selected:
            continue
        record = row.record
        rows.append({
            'account_number': record.account_number,
            'authorization_number': record.authorization_number,
            'product_name': record.product_name or "",
            'product_family': record.product_family or "",
            'currency_code': record.currency_code or view_model.currency_code,
            'authorized_amount': str(record.authorized_amount),
            'used_amount': str(record.used_amount),
            'overage_amount': str(record.overage_amount),
            'utilization_rate_percent': _percent_text(row.utilization_rate_percent),
            'overage_percent': _percent_text(row.overage_percent),
            'severity': row.severity.value,
        })
    return rows


def build_selection_csv(view_model: AnyViewModel) -> str:
    """Selected visible rows as CSV text (header only when nothing is selected)."""
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=EXPORT_COLUMNS, lineterminator="\n")
    writer.writeheader()
    writer.writerows(build_selection_rows(view_model))
    return buffer.getvalue()


def generate_export_filename(timestamp: Optional[datetime] = None) -> str:
    """
    Generate a descriptive filename for a selection export.

    Returns:
        Filename like "utilization_selection_20240531_180000.csv"
    """
    if timestamp is None:
        timestamp = datetime.now()
    return f"utilization_selection_{timestamp.strftime('%Y%m%d_%H%M%S')}.csv"
