# weekly_tracker/editor_history.py
import altair as alt
import streamlit as st

from .data_loader import fetch_reports_for_editor, fetch_roster, guarded_fetch
from .history import aggregate, hygiene_trend, within_range
from .views import flatten_reports, to_display_frame


def render_editor_history(store):
    st.title("👤 Editor History")

    roster = fetch_roster(store)
    if not roster:
        st.warning("No editors found in the registry.")
        return

    with st.sidebar:
        st.header("History Filters")
        member = st.selectbox("Editor", roster,
                              format_func=lambda m: f"{m.name} ({m.yaas_id})" if m.yaas_id else m.name)
        use_range = st.checkbox("Limit to a date range")
        start = end = None
        if use_range:
            picked = st.date_input("Submission Date Range", [])
            if picked and len(picked) == 2:
                start, end = picked

    reports = guarded_fetch("history_reports",
                            lambda: fetch_reports_for_editor(store, member.email, start, end))
    reports = within_range(reports, start, end)

    stats = aggregate(reports)
    if stats is None:
        st.info(f"No reports found for {member.name}.")
        return

    st.subheader(member.name)
    col1, col2, col3 = st.columns(3)
    col1.metric("Reports", stats.total_reports)
    col2.metric("Avg Hygiene", stats.avg_hygiene)
    col3.metric("Approved", f"{stats.total_approved:,}")
    col4, col5, col6 = st.columns(3)
    col4.metric("SF", f"{stats.total_sf:,}")
    col5.metric("LF", f"{stats.total_lf:,}")
    col6.metric("Minutes", f"{stats.total_minutes:,}")
    if stats.projects:
        st.write("IPs worked on: " + ", ".join(stats.projects))

    trend = hygiene_trend(reports)
    if len(trend) > 1:
        st.markdown("### 📊 Hygiene & output over time")
        base = alt.Chart(trend).encode(x=alt.X('Date:T', title='Date'))
        hygiene = base.mark_line(point=True, color='#1f77b4').encode(
            y=alt.Y('Hygiene:Q', scale=alt.Scale(domain=[0, 10])),
            tooltip=['Week', 'Hygiene', 'Output'])
        output = base.mark_bar(opacity=0.3, color='#2ca02c').encode(y=alt.Y('Output:Q'))
        st.altair_chart(alt.layer(output, hygiene).resolve_scale(y='independent'), use_container_width=True)

    st.markdown("### 📋 Reports")
    st.dataframe(to_display_frame(flatten_reports(reports)), use_container_width=True, hide_index=True)
