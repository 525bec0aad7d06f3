# weekly_tracker/admin_dashboard.py
import altair as alt
import streamlit as st

from .data_loader import fetch_reports_for_week, guarded_fetch
from .history import aggregate
from .submission_tracker import select_week
from .views import (
    COLUMN_LABELS, DISPLAY_COLUMNS, SortConfig, export_filename, export_workbook,
    flatten_reports, process_rows, project_totals, to_display_frame,
)

FILTERABLE_COLUMNS = ["editor_name", "yaas_id", "ip_name", "lead_editor", "channel_manager",
                      "has_blockers", "has_qc_changes", "mistakes_repeated", "delays"]


def _sort_controls():
    sort = st.session_state.get("sort_config", SortConfig())
    col1, col2 = st.columns([3, 1])
    key = col1.selectbox("Sort by", DISPLAY_COLUMNS, index=DISPLAY_COLUMNS.index(sort.key),
                         format_func=COLUMN_LABELS.get)
    # clicking the same column again flips the direction
    if col2.button("⇅ Sort", use_container_width=True):
        sort = sort.toggle(key)
        st.session_state["sort_config"] = sort
    return sort


def render_admin_dashboard(store):
    st.title("📈 Admin Dashboard")

    chosen, labels = select_week("admin_week")
    reports = guarded_fetch("admin_reports", lambda: fetch_reports_for_week(store, labels.week_label))

    st.subheader(f"{labels.week_label} — {chosen.label}")
    if not reports:
        st.info("No records found for the selected week.")
        return

    # ---------------- KPIs ----------------
    stats = aggregate(reports)
    col1, col2, col3, col4, col5 = st.columns(5)
    col1.metric("Reports", stats.total_reports)
    col2.metric("Avg Hygiene", stats.avg_hygiene)
    col3.metric("SF", f"{stats.total_sf:,}")
    col4.metric("LF", f"{stats.total_lf:,}")
    col5.metric("Approved", f"{stats.total_approved:,}")

    # ---------------- Filters ----------------
    rows = flatten_reports(reports)
    with st.sidebar:
        st.header("Filters")
        search = st.text_input("Search editor, YAAS ID or IP")
        filter_cols = st.multiselect("Column filters", FILTERABLE_COLUMNS, format_func=COLUMN_LABELS.get)
        column_filters = {c: st.text_input(f"{COLUMN_LABELS[c]} contains", key=f"filter_{c}") for c in filter_cols}

    sort = _sort_controls()
    processed = process_rows(rows, search, column_filters, sort)
    arrow = "↑" if sort.ascending else "↓"
    grouping = "rows grouped per report" if sort.grouped else "grouping off for per-IP columns"
    st.caption(f"Sorted by **{COLUMN_LABELS[sort.key]}** {arrow} ({grouping}). "
               f"Showing {len(processed)} of {len(rows)} rows.")

    # ---------------- Detailed Table ----------------
    st.markdown("### 📋 Reports")
    st.dataframe(to_display_frame(processed), use_container_width=True, hide_index=True)

    st.download_button(
        label="Download Excel",
        data=export_workbook(processed),
        file_name=export_filename(labels.week_label),
        mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )

    # ---------------- Output per IP ----------------
    totals = project_totals(processed)
    if not totals.empty:
        st.markdown("### 🔢 Output per IP")
        long = totals.melt(id_vars=["IP"], value_vars=["SF", "LF"], var_name="Format", value_name="Count")
        chart = alt.Chart(long).mark_bar().encode(
            x=alt.X('IP:N', sort='-y'),
            y=alt.Y('Count:Q', stack=True),
            color='Format:N',
            tooltip=['IP', 'Format', 'Count']
        ).properties(height=360)
        st.altair_chart(chart, use_container_width=True)
        st.dataframe(totals, hide_index=True)

    if stats.legacy_entries:
        st.caption(f"{stats.legacy_entries} IP entr{'y' if stats.legacy_entries == 1 else 'ies'} "
                   "use the legacy delivered-reels count as SF.")
