# src/utilization_core/actions.py
"""
Action types and reducer for overview state management.

NO STREAMLIT IMPORTS ALLOWED IN THIS MODULE.

This module implements an action/reducer pattern:
- Actions are dataclasses describing a user event
- apply_action() performs the state transition and then recomputes the
  ViewModel in full from the new state (call-after-mutate)
- There is no incremental update and no observer graph; the rendering
  layer always receives a complete ViewModel

Action Flow:
    Widget event → Action → apply_action() → (new state, new ViewModel)
"""
from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Any, FrozenSet, Iterable, Optional, Tuple

from .config import OverviewConfig, coerce_enum
from .model import AnyViewModel, FilterMode, SortMode, UtilizationRecord
from .pipeline import derive_view, visible_keys
from .selection import SelectionTracker
from .viewmodel import derive_view_model

logger = logging.getLogger(__name__)


class ActionType(Enum):
    """Enumeration of all action types."""
    # Input
    LOAD_RECORDS = auto()

    # View controls
    SET_FILTER_MODE = auto()
    SET_SORT_MODE = auto()

    # Selection
    TOGGLE_ROW = auto()
    SELECT_ALL_VISIBLE = auto()
    CLEAR_SELECTION = auto()


@dataclass
class ActionPayload:
    """Base payload for actions that need additional data."""
    pass


@dataclass
class LoadRecordsPayload(ActionPayload):
    records: Tuple[UtilizationRecord, ...]
    as_of: Optional[datetime] = None


@dataclass
class FilterModePayload(ActionPayload):
    filter_mode: FilterMode


@dataclass
class SortModePayload(ActionPayload):
    sort_mode: SortMode


@dataclass
class ToggleRowPayload(ActionPayload):
    row_key: str
    included: bool


@dataclass
class Action:
    """
    A user event to be applied to the overview state.

    Build instances through the classmethod constructors; they coerce
    string modes ("overused_only") into enums.
    """
    type: ActionType
    payload: Optional[ActionPayload] = None

    @classmethod
    def load_records(
        cls,
        records: Optional[Iterable[UtilizationRecord]],
        as_of: Optional[datetime] = None,
    ) -> 'Action':
        return cls(
            type=ActionType.LOAD_RECORDS,
            payload=LoadRecordsPayload(tuple(records or ()), as_of),
        )

    @classmethod
    def set_filter_mode(cls, mode: Any) -> 'Action':
        return cls(
            type=ActionType.SET_FILTER_MODE,
            payload=FilterModePayload(coerce_enum(FilterMode, mode)),
        )

    @classmethod
    def set_sort_mode(cls, mode: Any) -> 'Action':
        return cls(
            type=ActionType.SET_SORT_MODE,
            payload=SortModePayload(coerce_enum(SortMode, mode)),
        )

    @classmethod
    def toggle_row(cls, row_key: str, included: bool) -> 'Action':
        return cls(
            type=ActionType.TOGGLE_ROW,
            payload=ToggleRowPayload(row_key, bool(included)),
        )

    @classmethod
    def select_all_visible(cls) -> 'Action':
        return cls(type=ActionType.SELECT_ALL_VISIBLE)

    @classmethod
    def clear_selection(cls) -> 'Action':
        return cls(type=ActionType.CLEAR_SELECTION)


@dataclass
class OverviewState:
    """
    Everything the hosting view owns for one session.

    records, filter_mode, sort_mode and as_of are replaced wholesale on
    change. selection is the single mutable object and is carried over
    between states of the same session.
    """
    records: Tuple[UtilizationRecord, ...] = ()
    filter_mode: FilterMode = FilterMode.ALL
    sort_mode: SortMode = SortMode.INPUT_ORDER
    selection: SelectionTracker = field(default_factory=SelectionTracker)
    as_of: Optional[datetime] = None
    config: OverviewConfig = field(default_factory=OverviewConfig)

    @classmethod
    def initial(cls, config: Optional[OverviewConfig] = None) -> 'OverviewState':
        """Empty state on mount, with interactive defaults from config."""
        config = config or OverviewConfig()
        return cls(
            filter_mode=config.initial_filter_mode,
            sort_mode=config.initial_sort_mode,
            config=config,
        )

    def visible_records(self) -> Tuple[UtilizationRecord, ...]:
        return derive_view(self.records, self.filter_mode, self.sort_mode)

    def row_keys(self) -> FrozenSet[str]:
        return frozenset(r.row_key for r in self.records)


@dataclass
class ActionResult:
    """
    Result of applying an action.

    view_model is always a full recomputation from state. A refused action
    has success=False, an error message, and the unchanged state.
    """
    state: OverviewState
    view_model: AnyViewModel
    success: bool = True
    error: Optional[str] = None


def compute_view_model(state: OverviewState) -> AnyViewModel:
    """Derive the ViewModel for a state snapshot."""
    return derive_view_model(
        state.records,
        state.filter_mode,
        state.sort_mode,
        state.selection,
        config=state.config,
        as_of=state.as_of,
    )


def apply_action(state: OverviewState, action: Action) -> ActionResult:
    """
    Apply a user event to the overview state.

    This is the main reducer function. The state transition happens first,
    then the ViewModel is recomputed from the resulting state.

    Args:
        state: Current OverviewState
        action: Action to apply

    Returns:
        ActionResult with the new state and its ViewModel
    """
    new_state = state

    if action.type == ActionType.LOAD_RECORDS:
        payload: LoadRecordsPayload = action.payload
        new_state = dataclasses.replace(state, records=payload.records, as_of=payload.as_of)
        # Selected keys persist only while they exist in the input set
        state.selection.prune(new_state.row_keys())
        logger.info("Loaded %d record(s)", len(payload.records))

    elif action.type == ActionType.SET_FILTER_MODE:
        payload: FilterModePayload = action.payload
        new_state = dataclasses.replace(state, filter_mode=payload.filter_mode)

    elif action.type == ActionType.SET_SORT_MODE:
        payload: SortModePayload = action.payload
        new_state = dataclasses.replace(state, sort_mode=payload.sort_mode)

    elif action.type == ActionType.TOGGLE_ROW:
        payload: ToggleRowPayload = action.payload
        if payload.included and payload.row_key not in state.row_keys():
            logger.warning("Refusing to select unknown row key %r", payload.row_key)
            return ActionResult(
                state=state,
                view_model=compute_view_model(state),
                success=False,
                error=f"Unknown row key: {payload.row_key!r}",
            )
        state.selection.toggle(payload.row_key, payload.included)

    elif action.type == ActionType.SELECT_ALL_VISIBLE:
        state.selection.select_all_visible(visible_keys(state.visible_records()))

    elif action.type == ActionType.CLEAR_SELECTION:
        state.selection.clear()

    else:
        raise ValueError(f"Unhandled action type: {action.type!r}")

    return ActionResult(state=new_state, view_model=compute_view_model(new_state))
