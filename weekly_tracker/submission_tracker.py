# weekly_tracker/submission_tracker.py
import altair as alt
import pandas as pd
import streamlit as st

from .data_loader import fetch_reports_for_week, fetch_roster, guarded_fetch
from .tracker import STATUS_OPTIONS, filter_statuses, join_roster, submission_summary
from .weeks import label_for, week_options


def select_week(key="week"):
    """Sidebar week picker; returns (option, labels)."""
    opts = week_options()
    labels = [o.label for o in opts]
    # newest first, with two future weeks on top
    default = min(len(labels) - 1, 2)
    sel = st.sidebar.selectbox("Select Week", labels, index=default, key=key)
    chosen = opts[labels.index(sel)]
    return chosen, label_for(chosen.value)


def render_submission_tracker(store):
    st.title("✅ Weekly Submission Tracker")

    chosen, labels = select_week("tracker_week")
    st.subheader(f"{labels.week_label} — {chosen.label}")

    roster = fetch_roster(store)
    if not roster:
        st.warning("No editors found in the registry.")
        return
    reports = guarded_fetch("tracker_reports", lambda: fetch_reports_for_week(store, labels.week_label))
    statuses = join_roster(roster, reports)

    summary = submission_summary(statuses)
    col1, col2, col3 = st.columns(3)
    col1.metric("Submitted", f"{summary['submitted']} / {summary['total']}")
    col2.metric("Missing", summary["missing"])
    col3.metric("Completion", f"{summary['completion_pct']:.1f}%")

    f1, f2 = st.columns([3, 1])
    search = f1.text_input("Search name or YAAS ID")
    status = f2.selectbox("Status", STATUS_OPTIONS)
    shown = filter_statuses(statuses, search, status)

    table = pd.DataFrame([{
        "Editor": s.name,
        "YAAS ID": s.yaas_id,
        "Email": s.email,
        "Status": "Submitted" if s.has_submitted else "Missing",
        "Weekly Score": s.weekly_score if s.has_submitted else None,
    } for s in shown], columns=["Editor", "YAAS ID", "Email", "Status", "Weekly Score"])

    st.markdown("### 📋 Editors")
    if table.empty:
        st.info("No editors match the current filters.")
    else:
        st.dataframe(
            table.style.map(
                lambda v: 'color: #d62728;' if v == "Missing" else ('color: #2ca02c;' if v == "Submitted" else ''),
                subset=["Status"]),
            use_container_width=True,
        )
        st.download_button(
            label="Download tracker CSV",
            data=table.to_csv(index=False),
            file_name=f"tracker_{chosen.value}.csv",
            mime="text/csv",
        )

    missing = [s for s in statuses if not s.has_submitted]
    if missing:
        st.markdown("### ⚠️ Still to submit")
        for s in missing:
            st.warning(f"📩 **{s.name}** ({s.yaas_id or 'no YAAS ID'}) has not submitted for {labels.week_label}.")
    else:
        st.success("🎉 Every editor has submitted this week!")

    scored = table[table["Status"] == "Submitted"]
    if not scored.empty:
        st.markdown("### 📈 Weekly output (SF + LF)")
        chart = alt.Chart(scored).mark_bar().encode(
            x=alt.X('Weekly Score:Q'),
            y=alt.Y('Editor:N', sort='-x'),
            tooltip=['Editor', 'YAAS ID', 'Weekly Score']
        ).properties(height=320)
        st.altair_chart(chart, use_container_width=True)
