"""
Tests for the action reducer and OverviewSession.

Validates:
- Every event returns a fully recomputed ViewModel
- Selection persists across filter/sort changes
- select-all replaces rather than unions
- Loading a new record set prunes vanished keys
- Session-state binding works with a plain dict
"""
import os
import sys
from decimal import Decimal

import pytest

# Match existing test file pattern
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from utilization_core import (
    Action,
    ActionType,
    EmptyViewModel,
    FilterMode,
    OverviewConfig,
    OverviewSession,
    OverviewState,
    SortMode,
    ViewModel,
    apply_action,
    get_overview_session,
    reset_overview_session,
)
from utilization_core.session import SESSION_KEY

from conftest import make_record


@pytest.fixture
def session(scenario_records):
    return OverviewSession(scenario_records)


def key_of(records, account):
    return next(r.row_key for r in records if r.account_number == account)


# ═══════════════════════════════════════════════════════════════════════════════
# ACTION CONSTRUCTION
# ═══════════════════════════════════════════════════════════════════════════════

class TestAction:
    """Tests for Action classmethod constructors."""

    def test_filter_mode_from_string(self):
        action = Action.set_filter_mode("overused_only")
        assert action.type == ActionType.SET_FILTER_MODE
        assert action.payload.filter_mode == FilterMode.OVERUSED_ONLY

    def test_sort_mode_from_enum(self):
        action = Action.set_sort_mode(SortMode.OVERAGE_DESC)
        assert action.payload.sort_mode == SortMode.OVERAGE_DESC

    def test_unknown_mode_rejected(self):
        with pytest.raises(ValueError):
            Action.set_sort_mode("alphabetical")

    def test_load_records_none_becomes_empty(self):
        action = Action.load_records(None)
        assert action.payload.records == ()


# ═══════════════════════════════════════════════════════════════════════════════
# REDUCER
# ═══════════════════════════════════════════════════════════════════════════════

class TestApplyAction:
    """Tests for apply_action()."""

    def test_initial_state_is_empty(self):
        state = OverviewState.initial()
        result = apply_action(state, Action.clear_selection())
        assert isinstance(result.view_model, EmptyViewModel)
        assert result.success is True

    def test_initial_state_uses_config(self):
        config = OverviewConfig(
            initial_filter_mode=FilterMode.OVERUSED_ONLY,
            initial_sort_mode=SortMode.OVERAGE_DESC,
        )
        state = OverviewState.initial(config)
        assert state.filter_mode == FilterMode.OVERUSED_ONLY
        assert state.sort_mode == SortMode.OVERAGE_DESC

    def test_load_then_view_model_populated(self, scenario_records):
        result = apply_action(OverviewState.initial(), Action.load_records(scenario_records))
        assert isinstance(result.view_model, ViewModel)
        assert result.state.records == tuple(scenario_records)

    def test_filter_change_replaces_state(self, scenario_records):
        state = apply_action(OverviewState.initial(), Action.load_records(scenario_records)).state
        result = apply_action(state, Action.set_filter_mode(FilterMode.OVERUSED_ONLY))
        assert result.state is not state
        assert state.filter_mode == FilterMode.ALL
        assert result.state.filter_mode == FilterMode.OVERUSED_ONLY
        assert result.view_model.visible_count == 1

    def test_selection_shared_between_states(self, scenario_records):
        state = apply_action(OverviewState.initial(), Action.load_records(scenario_records)).state
        result = apply_action(state, Action.set_sort_mode(SortMode.OVERAGE_DESC))
        assert result.state.selection is state.selection

    def test_toggle_unknown_key_refused(self, scenario_records):
        state = apply_action(OverviewState.initial(), Action.load_records(scenario_records)).state
        result = apply_action(state, Action.toggle_row("ghost", True))
        assert result.success is False
        assert "ghost" in result.error
        assert len(state.selection) == 0
        assert result.view_model.selection_totals.count == 0

    def test_deselect_unknown_key_is_noop(self, scenario_records):
        state = apply_action(OverviewState.initial(), Action.load_records(scenario_records)).state
        result = apply_action(state, Action.toggle_row("ghost", False))
        assert result.success is True

    def test_every_action_recomputes(self, scenario_records):
        state = apply_action(OverviewState.initial(), Action.load_records(scenario_records)).state
        key = scenario_records[0].row_key
        before = apply_action(state, Action.set_sort_mode(SortMode.INPUT_ORDER)).view_model
        after = apply_action(state, Action.toggle_row(key, True)).view_model
        assert before is not after
        assert before.selection_totals.count == 0
        assert after.selection_totals.count == 1


# ═══════════════════════════════════════════════════════════════════════════════
# SESSION BEHAVIOUR
# ═══════════════════════════════════════════════════════════════════════════════

class TestOverviewSession:
    """Tests for OverviewSession event methods."""

    def test_empty_session(self):
        session = OverviewSession()
        assert session.view_model.is_empty is True

    def test_empty_records_list_is_empty_variant(self):
        session = OverviewSession([])
        assert isinstance(session.view_model, EmptyViewModel)

    def test_scenario_view_model(self, session):
        vm = session.view_model
        assert vm.aggregate.total_authorized == Decimal(1500)
        assert round(vm.aggregate.utilization_rate_percent, 2) == Decimal("106.67")

    def test_select_all_then_header_checked(self, session):
        session.select_all_visible()
        assert session.view_model.all_visible_selected is True
        assert session.view_model.selection_totals.count == 2

    def test_select_all_on_empty_view_unchecked(self):
        session = OverviewSession([make_record("A2", authorized=500, used=400, overage=0)])
        session.set_filter_mode(FilterMode.OVERUSED_ONLY)
        session.select_all_visible()
        assert session.view_model.visible_count == 0
        assert session.view_model.all_visible_selected is False

    def test_selection_persists_across_filter_change(self, session, scenario_records):
        a2 = key_of(scenario_records, "A2")
        session.toggle_row(a2, True)

        session.set_filter_mode(FilterMode.OVERUSED_ONLY)
        assert a2 in session.state.selection
        assert session.view_model.selection_totals.count == 0

        session.set_filter_mode(FilterMode.ALL)
        row = next(r for r in session.view_model.rows if r.row_key == a2)
        assert row.is_selected is True
        assert session.view_model.selection_totals.count == 1

    def test_selection_totals_exclude_hidden(self, session, scenario_records):
        for record in scenario_records:
            session.toggle_row(record.row_key, True)
        session.set_filter_mode(FilterMode.OVERUSED_ONLY)
        totals = session.view_model.selection_totals
        assert totals.count == 1
        assert totals.total_overage == Decimal(200)
        assert session.view_model.selected_count == 2

    def test_select_all_while_filtered_then_unfilter(self, session, scenario_records):
        """Select-all replaces the set, so only the overused key stays selected."""
        session.set_filter_mode(FilterMode.OVERUSED_ONLY)
        session.select_all_visible()
        session.set_filter_mode(FilterMode.ALL)

        vm = session.view_model
        assert [r.is_selected for r in vm.rows] == [True, False]
        assert vm.all_visible_selected is False
        assert session.state.selection.keys == frozenset({key_of(scenario_records, "A1")})

    def test_select_all_drops_prior_hidden_selection(self, session, scenario_records):
        session.toggle_row(key_of(scenario_records, "A2"), True)
        session.set_filter_mode(FilterMode.OVERUSED_ONLY)
        session.select_all_visible()
        assert session.state.selection.keys == frozenset({key_of(scenario_records, "A1")})

    def test_clear_selection(self, session):
        session.select_all_visible()
        session.clear_selection()
        vm = session.view_model
        assert vm.selection_totals.count == 0
        assert vm.selection_totals.total_authorized == 0
        assert vm.selected_count == 0
        assert not any(r.is_selected for r in vm.rows)

    def test_sort_change_keeps_selection(self, session, scenario_records):
        a1 = key_of(scenario_records, "A1")
        session.toggle_row(a1, True)
        session.set_sort_mode(SortMode.AUTHORIZED_AMOUNT_DESC)
        assert session.view_model.selection_totals.count == 1

    def test_reload_prunes_vanished_keys(self, session, scenario_records):
        session.select_all_visible()
        session.load_records([scenario_records[0], make_record("A9", authorized=10)])
        assert session.state.selection.keys == frozenset({key_of(scenario_records, "A1")})
        assert session.view_model.selection_totals.count == 1

    def test_reload_keeps_filter_and_sort(self, session, scenario_records):
        session.set_filter_mode(FilterMode.OVERUSED_ONLY)
        session.set_sort_mode(SortMode.OVERAGE_DESC)
        session.load_records(scenario_records)
        assert session.view_model.filter_mode == FilterMode.OVERUSED_ONLY
        assert session.view_model.sort_mode == SortMode.OVERAGE_DESC

    def test_reload_empty_clears_selection(self, session):
        session.select_all_visible()
        session.load_records(None)
        assert session.view_model.is_empty is True
        assert len(session.state.selection) == 0

    def test_string_modes_accepted(self, session):
        session.set_filter_mode("overused_only")
        session.set_sort_mode("authorized_amount_desc")
        assert session.view_model.filter_mode == FilterMode.OVERUSED_ONLY
        assert session.view_model.sort_mode == SortMode.AUTHORIZED_AMOUNT_DESC


# ═══════════════════════════════════════════════════════════════════════════════
# SESSION-STATE BINDING
# ═══════════════════════════════════════════════════════════════════════════════

class TestSessionStateBinding:
    """Tests for get_overview_session / reset_overview_session with a dict."""

    def test_get_creates_once(self):
        ss = {}
        first = get_overview_session(ss)
        second = get_overview_session(ss)
        assert first is second
        assert ss[SESSION_KEY] is first

    def test_get_replaces_foreign_value(self):
        ss = {SESSION_KEY: "stale"}
        assert isinstance(get_overview_session(ss), OverviewSession)

    def test_reset_discards_selection(self, scenario_records):
        ss = {}
        session = get_overview_session(ss)
        session.load_records(scenario_records)
        session.select_all_visible()

        fresh = reset_overview_session(ss, reason="test")
        assert fresh is not session
        assert fresh.view_model.is_empty is True
        assert len(fresh.state.selection) == 0

    def test_reset_keeps_config(self):
        ss = {}
        get_overview_session(ss, config=OverviewConfig(default_currency="EUR"))
        fresh = reset_overview_session(ss)
        assert fresh.config.default_currency == "EUR"

    def test_sessions_do_not_share_selection(self, scenario_records):
        a = OverviewSession(scenario_records)
        b = OverviewSession(scenario_records)
        a.select_all_visible()
        assert len(b.state.selection) == 0
