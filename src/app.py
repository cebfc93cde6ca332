"""
Authorization Utilization Overview - Streamlit GUI

Thin rendering shell over utilization_core. Every widget event is turned
into one OverviewSession call (which recomputes the ViewModel in full),
followed by a rerun. Nothing on this page computes a statistic or a
severity tier itself.

Run:
    streamlit run src/app.py
"""

# ==============================================================================
# STREAMLIT BOOTSTRAP
# set_page_config MUST be the first Streamlit call in the process.
# ==============================================================================

import streamlit as st

st.set_page_config(
    page_title="Authorization Utilization Overview",
    page_icon="💳",
    layout="wide",
    initial_sidebar_state="collapsed",
)

import logging

from utilization_core import (
    FilterMode,
    OverviewConfig,
    RecordValidationError,
    SortMode,
    build_selection_csv,
    generate_export_filename,
    get_overview_session,
    load_snapshot,
    reset_overview_session,
)
from utilization_view import format_amount, format_percent, get_severity_badge_html

logger = logging.getLogger(__name__)


# ==============================================================================
# SAMPLE DATA (shown until a snapshot is uploaded)
# ==============================================================================

SAMPLE_SNAPSHOT = {
    "asOf": "2024-05-31T18:00:00Z",
    "records": [
        {"accountNumber": "A1", "authorizationNumber": "1", "authorizedAmount": 1000,
         "usedAmount": 1200, "overageAmount": 200, "currencyCode": "MAD",
         "productName": "Overdraft facility", "productFamily": "Short-term credit"},
        {"accountNumber": "A2", "authorizationNumber": "1", "authorizedAmount": 500,
         "usedAmount": 400, "overageAmount": 0, "currencyCode": "MAD",
         "productName": "Cash credit", "productFamily": "Short-term credit"},
        {"accountNumber": "A3", "authorizationNumber": "7", "authorizedAmount": 25000,
         "usedAmount": 26500, "overageAmount": 1500, "currencyCode": "MAD",
         "productName": "Documentary credit", "productFamily": "Trade finance"},
        {"accountNumber": "A3", "authorizationNumber": "8", "authorizedAmount": 8000,
         "usedAmount": 12000, "overageAmount": 4000, "currencyCode": "MAD",
         "productName": "Bank guarantee", "productFamily": "Trade finance"},
    ],
}

FILTER_LABELS = {
    FilterMode.ALL: "All lines",
    FilterMode.OVERUSED_ONLY: "Overused only",
}

SORT_LABELS = {
    SortMode.INPUT_ORDER: "As delivered",
    SortMode.AUTHORIZED_AMOUNT_DESC: "Authorized amount (high → low)",
    SortMode.OVERAGE_DESC: "Overage (high → low)",
}

config = OverviewConfig()
session = get_overview_session(st.session_state, config=config)


# ==============================================================================
# INPUT
# ==============================================================================

st.title("💳 Authorization Utilization Overview")

uploaded = st.file_uploader("Snapshot (JSON)", type=["json"])
upload_id = getattr(uploaded, "file_id", None) or (uploaded.name if uploaded else "sample")

if st.session_state.get("loaded_snapshot_id") != upload_id:
    try:
        payload = uploaded.getvalue() if uploaded else SAMPLE_SNAPSHOT
        snapshot = load_snapshot(payload, policy=config.duplicate_policy)
    except RecordValidationError as e:
        logger.warning("Snapshot %s rejected: %s", upload_id, e)
        st.error(f"Could not load snapshot: {e}")
        st.stop()
    session = reset_overview_session(st.session_state, config=config, reason="snapshot loaded")
    session.load_records(snapshot.records, as_of=snapshot.as_of)
    st.session_state["loaded_snapshot_id"] = upload_id

view_model = session.view_model

if view_model.is_empty:
    st.info("No authorization lines for this client.")
    st.stop()

currency = view_model.currency_code
if view_model.as_of is not None:
    st.caption(f"As of {view_model.as_of:%Y-%m-%d %H:%M %Z}")


# ==============================================================================
# PORTFOLIO STATISTICS (full input set, filter ignored)
# ==============================================================================

agg = view_model.aggregate
c1, c2, c3, c4, c5 = st.columns(5)
c1.metric("Accounts", agg.total_accounts)
c2.metric("Authorized", format_amount(agg.total_authorized, currency))
c3.metric("Used", format_amount(agg.total_used, currency))
c4.metric("Utilization", format_percent(agg.utilization_rate_percent))
c5.metric("Overused lines", agg.overused_count)


# ==============================================================================
# CONTROLS
# ==============================================================================

ctrl_filter, ctrl_sort, ctrl_clear = st.columns([2, 2, 1])

with ctrl_filter:
    filter_choice = st.radio(
        "Show",
        options=list(FILTER_LABELS),
        index=list(FILTER_LABELS).index(view_model.filter_mode),
        format_func=FILTER_LABELS.get,
        horizontal=True,
    )
    if filter_choice != view_model.filter_mode:
        session.set_filter_mode(filter_choice)
        st.rerun()

with ctrl_sort:
    sort_choice = st.selectbox(
        "Sort by",
        options=list(SORT_LABELS),
        index=list(SORT_LABELS).index(view_model.sort_mode),
        format_func=SORT_LABELS.get,
    )
    if sort_choice != view_model.sort_mode:
        session.set_sort_mode(sort_choice)
        st.rerun()

with ctrl_clear:
    if st.button("Clear selection", disabled=view_model.selected_count == 0):
        session.clear_selection()
        st.rerun()


# ==============================================================================
# LINES
# ==============================================================================

widths = [0.5, 2, 2, 2, 2, 1.5, 2]
header = st.columns(widths)
select_all = header[0].checkbox(
    "Select all visible",
    value=view_model.all_visible_selected,
    disabled=view_model.visible_count == 0,
    label_visibility="collapsed",
)
if select_all != view_model.all_visible_selected:
    if select_all:
        session.select_all_visible()
    else:
        session.clear_selection()
    st.rerun()

for col, title in zip(header[1:], ["Account / Auth", "Authorized", "Used", "Overage", "Utilization", "Severity"]):
    col.markdown(f"**{title}**")

if view_model.visible_count == 0:
    st.caption("No lines match the current filter.")

for row in view_model.rows:
    record = row.record
    row_currency = record.currency_code or currency
    cols = st.columns(widths)
    checked = cols[0].checkbox(
        f"Select {record.account_number}/{record.authorization_number}",
        value=row.is_selected,
        label_visibility="collapsed",
    )
    if checked != row.is_selected:
        session.toggle_row(row.row_key, checked)
        st.rerun()

    product = f" · {record.product_name}" if record.product_name else ""
    cols[1].markdown(f"{record.account_number} / {record.authorization_number}{product}")
    cols[2].write(format_amount(record.authorized_amount, row_currency))
    cols[3].write(format_amount(record.used_amount, row_currency))
    cols[4].write(
        f"{format_amount(record.overage_amount, row_currency)} ({format_percent(row.overage_percent)})"
    )
    cols[5].write(format_percent(row.utilization_rate_percent))
    cols[6].markdown(get_severity_badge_html(row.severity), unsafe_allow_html=True)


# ==============================================================================
# SELECTION TOTALS (visible ∩ selected)
# ==============================================================================

totals = view_model.selection_totals
st.divider()
s1, s2, s3, s4 = st.columns(4)
s1.metric("Selected (visible)", totals.count)
s2.metric("Selected authorized", format_amount(totals.total_authorized, currency))
s3.metric("Selected used", format_amount(totals.total_used, currency))
s4.metric("Selected overage", format_amount(totals.total_overage, currency))

hidden = view_model.selected_count - totals.count
if hidden > 0:
    st.caption(f"{hidden} selected line(s) hidden by the current filter are not included in these totals.")

st.download_button(
    "⬇️ Export selection (CSV)",
    data=build_selection_csv(view_model),
    file_name=generate_export_filename(),
    mime="text/csv",
    disabled=totals.count == 0,
)
