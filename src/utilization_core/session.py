# src/utilization_core/session.py
"""
Session binding for the overview.

NO STREAMLIT IMPORTS ALLOWED IN THIS MODULE.

OverviewSession owns one OverviewState and exposes the user events as
methods. Every method applies the event through apply_action(), so the
view_model property is always a full recomputation from current state.

get_overview_session() / reset_overview_session() treat the host's session
state as a plain mutable mapping, so they work with st.session_state and
with a dict in tests.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Iterable, MutableMapping, Optional

from .actions import Action, ActionResult, OverviewState, apply_action, compute_view_model
from .config import OverviewConfig
from .model import AnyViewModel, UtilizationRecord

logger = logging.getLogger(__name__)

SESSION_KEY = "utilization_overview_session"


class OverviewSession:
    """One analyst's in-memory overview of a client's authorization lines."""

    def __init__(
        self,
        records: Optional[Iterable[UtilizationRecord]] = None,
        *,
        config: Optional[OverviewConfig] = None,
        as_of: Optional[datetime] = None,
    ) -> None:
        self._state = OverviewState.initial(config)
        self._view_model = compute_view_model(self._state)
        if records is not None:
            self.load_records(records, as_of=as_of)

    @property
    def state(self) -> OverviewState:
        return self._state

    @property
    def view_model(self) -> AnyViewModel:
        return self._view_model

    @property
    def config(self) -> OverviewConfig:
        return self._state.config

    def dispatch(self, action: Action) -> ActionResult:
        """Apply an action and keep the resulting state and ViewModel."""
        result = apply_action(self._state, action)
        self._state = result.state
        self._view_model = result.view_model
        return result

    def load_records(
        self,
        records: Optional[Iterable[UtilizationRecord]],
        *,
        as_of: Optional[datetime] = None,
    ) -> ActionResult:
        return self.dispatch(Action.load_records(records, as_of))

    def set_filter_mode(self, mode: Any) -> ActionResult:
        return self.dispatch(Action.set_filter_mode(mode))

    def set_sort_mode(self, mode: Any) -> ActionResult:
        return self.dispatch(Action.set_sort_mode(mode))

    def toggle_row(self, row_key: str, included: bool) -> ActionResult:
        return self.dispatch(Action.toggle_row(row_key, included))

    def select_all_visible(self) -> ActionResult:
        return self.dispatch(Action.select_all_visible())

    def clear_selection(self) -> ActionResult:
        return self.dispatch(Action.clear_selection())


def get_overview_session(
    ss: MutableMapping[str, Any],
    *,
    config: Optional[OverviewConfig] = None,
) -> OverviewSession:
    """
    Fetch the session stored in ss, creating an empty one if missing.

    Args:
        ss: The session state mapping (e.g. st.session_state or a dict)
        config: Config used only when a new session is created

    Returns:
        The OverviewSession bound to ss
    """
    session = ss.get(SESSION_KEY)
    if not isinstance(session, OverviewSession):
        session = OverviewSession(config=config)
        ss[SESSION_KEY] = session
    return session


def reset_overview_session(
    ss: MutableMapping[str, Any],
    *,
    config: Optional[OverviewConfig] = None,
    reason: Optional[str] = None,
) -> OverviewSession:
    """
    Replace the stored session with a fresh, empty one.

    Selection, filter and sort choices are discarded; nothing carries over.

    Args:
        ss: The session state mapping
        config: Config for the new session (defaults to the old session's)
        reason: Optional human-readable reason for the reset (for tracing)

    Returns:
        The new OverviewSession
    """
    previous = ss.get(SESSION_KEY)
    if config is None and isinstance(previous, OverviewSession):
        config = previous.config

    session = OverviewSession(config=config)
    ss[SESSION_KEY] = session

    logger.info(
        "overview session reset (%s); previous_selected=%d",
        reason or "unspecified",
        len(previous.state.selection) if isinstance(previous, OverviewSession) else 0,
    )
    return session
