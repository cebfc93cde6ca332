# src/utilization_core/config.py
"""
Configuration for the utilization overview.

NO STREAMLIT IMPORTS ALLOWED IN THIS MODULE.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Type, TypeVar

from .model import FilterMode, SortMode

DEFAULT_CURRENCY = "MAD"

E = TypeVar('E', bound=Enum)


class DuplicatePolicy(Enum):
    """What ingestion does with a repeated account/authorization pair."""
    REJECT = "reject"          # raise DuplicateRowKeyError
    KEEP_FIRST = "keep_first"  # keep first occurrence, log the rest


def coerce_enum(enum_cls: Type[E], value: Any) -> E:
    """Accept an enum member or its string value (case-insensitive)."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValueError(
            f"Invalid {enum_cls.__name__} {value!r}; expected one of: {allowed}"
        ) from None


@dataclass(frozen=True)
class OverviewConfig:
    """Settings for one overview session."""
    # Used when the first record carries no currency code
    default_currency: str = DEFAULT_CURRENCY

    # Interactive state on mount
    initial_filter_mode: FilterMode = FilterMode.ALL
    initial_sort_mode: SortMode = SortMode.INPUT_ORDER

    # RowKey uniqueness at ingestion
    duplicate_policy: DuplicatePolicy = DuplicatePolicy.REJECT

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> 'OverviewConfig':
        """
        Build a config from a plain mapping (settings file, session state).

        Enum fields accept their string values, e.g. "overused_only".
        Missing keys fall back to defaults.

        Raises:
            ValueError: On unknown enum values
        """
        return cls(
            default_currency=str(data.get('default_currency') or DEFAULT_CURRENCY),
            initial_filter_mode=coerce_enum(
                FilterMode, data.get('initial_filter_mode', FilterMode.ALL)
            ),
            initial_sort_mode=coerce_enum(
                SortMode, data.get('initial_sort_mode', SortMode.INPUT_ORDER)
            ),
            duplicate_policy=coerce_enum(
                DuplicatePolicy, data.get('duplicate_policy', DuplicatePolicy.REJECT)
            ),
        )
