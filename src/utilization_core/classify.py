# src/utilization_core/classify.py
"""
Overuse severity classification.

NO STREAMLIT IMPORTS ALLOWED IN THIS MODULE.

Tiers (upper bounds inclusive, so a boundary value lands in the lower tier):
- no overage              -> NORMAL
- 0  < percent <= 10      -> MINOR_OVERAGE
- 10 < percent <= 20      -> MODERATE_OVERAGE
- percent > 20            -> CRITICAL_OVERAGE

Presentation (badges, colors, icons) is derived from SeverityLevel only,
never from the raw percentage, so display cannot drift from these tiers.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Optional, Union

from .model import SeverityLevel, UtilizationRecord
from .statistics import per_row_overage_percent

MINOR_OVERAGE_CEILING = Decimal(10)
MODERATE_OVERAGE_CEILING = Decimal(20)

Number = Union[Decimal, int, float]


def classify(
    overage_percent: Number,
    overage_amount: Optional[Number] = None,
) -> SeverityLevel:
    """
    Map an overage percentage to a severity level.

    Pure and total. When overage_amount is supplied and equals zero the
    result is NORMAL regardless of the percentage.

    Args:
        overage_percent: Overage as a percentage of the authorized amount
        overage_amount: Optional raw overage amount

    Returns:
        SeverityLevel for the line
    """
    if overage_amount is not None and overage_amount == 0:
        return SeverityLevel.NORMAL
    if overage_percent <= 0:
        return SeverityLevel.NORMAL
    if overage_percent <= MINOR_OVERAGE_CEILING:
        return SeverityLevel.MINOR_OVERAGE
    if overage_percent <= MODERATE_OVERAGE_CEILING:
        return SeverityLevel.MODERATE_OVERAGE
    return SeverityLevel.CRITICAL_OVERAGE


def classify_record(record: UtilizationRecord) -> SeverityLevel:
    """Classify a record using its computed overage percentage."""
    return classify(per_row_overage_percent(record), record.overage_amount)
