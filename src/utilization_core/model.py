# src/utilization_core/model.py
"""
Data model for the authorization utilization overview.

NO STREAMLIT IMPORTS ALLOWED IN THIS MODULE.

Model Categories:
-----------------
1. Input: UtilizationRecord
   - One row per account/authorization pair, immutable per render cycle
   - Identity is the RowKey (account number + authorization number)

2. Interactive state enums: FilterMode, SortMode
   - Owned by the hosting view, passed into the pipeline as snapshots

3. Derived output: RowView, AggregateStats, SelectionTotals, ViewModel
   - Never stored; recomputed from scratch after every state change
   - EmptyViewModel is the explicit variant for absent/empty input
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from enum import Enum
from typing import Any, Optional, Tuple, Union


# ASCII unit separator; rejected inside identifiers so keys never collide
ROW_KEY_SEPARATOR = "\x1f"

ZERO = Decimal(0)


def to_decimal(value: Any) -> Decimal:
    """
    Coerce an amount to Decimal.

    Floats go through str() so 0.1 stays 0.1 instead of its binary expansion.

    Raises:
        ValueError: If the value is not numeric
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Amount must be numeric, got {value!r}")
    if isinstance(value, float):
        value = str(value)
    try:
        result = Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise ValueError(f"Amount must be numeric, got {value!r}") from e
    if not result.is_finite():
        raise ValueError(f"Amount must be finite, got {value!r}")
    return result


def round_half_up(value: Decimal, places: int = 2) -> Decimal:
    """
    Round to a fixed number of places, half away from zero.

    Percentages are unbounded, so the working precision grows with the
    magnitude of the value instead of failing at the default 28 digits.
    """
    value = Decimal(value)
    step = Decimal(1).scaleb(-places)
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + places + 2)
        return value.quantize(step, rounding=ROUND_HALF_UP)


def make_row_key(account_number: str, authorization_number: str) -> str:
    """
    Build the RowKey identifying one account/authorization pair.

    Raises:
        ValueError: If either component contains the separator
    """
    for part in (account_number, authorization_number):
        if ROW_KEY_SEPARATOR in part:
            raise ValueError(f"Identifier {part!r} contains the row key separator")
    return f"{account_number}{ROW_KEY_SEPARATOR}{authorization_number}"


def split_row_key(row_key: str) -> Tuple[str, str]:
    """Inverse of make_row_key: (account_number, authorization_number)."""
    account_number, sep, authorization_number = row_key.partition(ROW_KEY_SEPARATOR)
    if not sep:
        raise ValueError(f"Not a row key: {row_key!r}")
    return account_number, authorization_number


class FilterMode(Enum):
    """Which records are visible."""
    ALL = "all"
    OVERUSED_ONLY = "overused_only"


class SortMode(Enum):
    """Ordering applied after filtering."""
    INPUT_ORDER = "input_order"
    AUTHORIZED_AMOUNT_DESC = "authorized_amount_desc"
    OVERAGE_DESC = "overage_desc"


class SeverityLevel(Enum):
    """Overuse severity of a single authorization line."""
    NORMAL = "normal"
    MINOR_OVERAGE = "minor_overage"
    MODERATE_OVERAGE = "moderate_overage"
    CRITICAL_OVERAGE = "critical_overage"


class ViewModelKind(Enum):
    EMPTY = "empty"
    POPULATED = "populated"


@dataclass(frozen=True)
class UtilizationRecord:
    """
    One credit-authorization line as delivered by the data-fetch layer.

    overage_amount is trusted as delivered (upstream computes it as
    max(0, used - authorized)); nothing here re-derives or validates it.
    """
    account_number: str
    authorization_number: str
    authorized_amount: Decimal
    used_amount: Decimal
    overage_amount: Decimal
    currency_code: Optional[str] = None
    product_name: Optional[str] = None
    product_family: Optional[str] = None

    def __post_init__(self) -> None:
        # Frozen dataclass: coerce amounts in place via object.__setattr__
        for name in ('authorized_amount', 'used_amount', 'overage_amount'):
            object.__setattr__(self, name, to_decimal(getattr(self, name)))

    @property
    def row_key(self) -> str:
        return make_row_key(self.account_number, self.authorization_number)

    @property
    def is_overused(self) -> bool:
        return self.overage_amount > 0


@dataclass(frozen=True)
class AggregateStats:
    """Portfolio-wide statistics over the full input set (filter ignored)."""
    total_authorized: Decimal = ZERO
    total_used: Decimal = ZERO
    total_overage: Decimal = ZERO
    overused_count: int = 0
    utilization_rate_percent: Decimal = ZERO
    total_accounts: int = 0


@dataclass(frozen=True)
class SelectionTotals:
    """Running totals over rows that are both visible and selected."""
    total_authorized: Decimal = ZERO
    total_used: Decimal = ZERO
    total_overage: Decimal = ZERO
    count: int = 0


@dataclass(frozen=True)
class RowView:
    """A visible record with its derived per-row fields attached."""
    record: UtilizationRecord
    row_key: str
    overage_percent: Decimal
    utilization_rate_percent: Decimal
    severity: SeverityLevel
    is_selected: bool = False


@dataclass(frozen=True)
class EmptyViewModel:
    """
    Explicit variant for an absent or zero-length record set.

    The rendering layer branches on this instead of inferring emptiness
    from zeroed totals.
    """
    filter_mode: FilterMode = FilterMode.ALL
    sort_mode: SortMode = SortMode.INPUT_ORDER
    as_of: Optional[datetime] = None

    @property
    def kind(self) -> ViewModelKind:
        return ViewModelKind.EMPTY

    @property
    def is_empty(self) -> bool:
        return True


@dataclass(frozen=True)
class ViewModel:
    """
    Render-only derived state for a non-empty record set.

    NEVER mutate or store this; always recompute via derive_view_model().
    Carries semantic fields only (enums, Decimals, booleans); no
    presentation strings.
    """
    rows: Tuple[RowView, ...]
    aggregate: AggregateStats
    selection_totals: SelectionTotals
    all_visible_selected: bool
    currency_code: str
    filter_mode: FilterMode
    sort_mode: SortMode
    total_count: int
    as_of: Optional[datetime] = None
    selected_count: int = 0

    @property
    def kind(self) -> ViewModelKind:
        return ViewModelKind.POPULATED

    @property
    def is_empty(self) -> bool:
        return False

    @property
    def visible_count(self) -> int:
        return len(self.rows)

    @property
    def visible_keys(self) -> Tuple[str, ...]:
        return tuple(row.row_key for row in self.rows)


AnyViewModel = Union[ViewModel, EmptyViewModel]
