# weekly_tracker/report_form.py
import uuid
from datetime import date

import streamlit as st

from .data_loader import StoreError, fetch_project_options
from .submission import GENERAL_DEFAULTS, SubmissionError, new_entry, resolve_identity, submit_report
from .weeks import label_for, week_range_label

YES_NO = ["Yes", "No"]


def _new_tab() -> dict:
    entry = new_entry()
    entry["uid"] = uuid.uuid4().hex[:8]
    return entry


def _entries() -> list:
    if "entries" not in st.session_state:
        st.session_state["entries"] = [_new_tab()]
    return st.session_state["entries"]


def _yes_no(label, value, key):
    return st.radio(label, YES_NO, index=YES_NO.index(value), horizontal=True, key=key)


def render_login(store):
    st.title("🔐 Weekly Report Login")
    with st.form("login"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Log In")
    if submitted:
        try:
            store.sign_in(email, password)
        except StoreError as e:
            st.error(f"Login failed: {e}")
        else:
            st.rerun()


def _render_general(general):
    st.markdown("### 1. General Questions")
    col1, col2 = st.columns(2)
    general["hygiene_score"] = col1.number_input(
        "Hygiene Score (0-10)", min_value=0.0, max_value=10.0, step=0.5,
        value=float(general["hygiene_score"]), key="gen_hygiene")
    general["next_week_commitment"] = col2.number_input(
        "Next Week Commitment", min_value=0.0, step=0.5,
        value=float(general["next_week_commitment"]), key="gen_commitment")

    general["mistakes_repeated"] = _yes_no("Mistakes Repeated?", general["mistakes_repeated"], "gen_mistakes")
    if general["mistakes_repeated"] == "Yes":
        general["mistake_details"] = st.text_area("Mistake details", general["mistake_details"], key="gen_mistake_details")

    general["delays"] = _yes_no("Any Delays?", general["delays"], "gen_delays")
    if general["delays"] == "Yes":
        general["delay_reasons"] = st.text_area("Reason for delays", general["delay_reasons"], key="gen_delay_reasons")

    st.markdown("**Improvements & Feedback**")
    general["general_improvements"] = st.text_area("Improvements from last week", general["general_improvements"], key="gen_improvements")
    general["areas_improvement"] = st.text_area("Areas for Improvement", general["areas_improvement"], key="gen_areas")
    general["overall_feedback"] = st.text_area("Overall Feedback", general["overall_feedback"], key="gen_feedback")


def _render_entry(entry, ip_options):
    k = entry["uid"]
    col1, col2, col3 = st.columns(3)
    if ip_options:
        choices = [""] + ip_options
        current = entry["ip_name"] if entry["ip_name"] in choices else ""
        entry["ip_name"] = col1.selectbox("IP Name", choices, index=choices.index(current), key=f"{k}_ip")
    else:
        entry["ip_name"] = col1.text_input("IP Name", entry["ip_name"], key=f"{k}_ip")
    entry["lead_editor"] = col2.text_input("Lead Editor", entry["lead_editor"], key=f"{k}_lead")
    entry["channel_manager"] = col3.text_input("Manager", entry["channel_manager"], key=f"{k}_manager")

    m1, m2, m3, m4 = st.columns(4)
    entry["sf_daily"] = m1.number_input("SF Daily", min_value=0, step=1, value=int(entry["sf_daily"]), key=f"{k}_sf")
    entry["lf_daily"] = m2.number_input("LF Daily", min_value=0, step=1, value=int(entry["lf_daily"]), key=f"{k}_lf")
    entry["total_minutes"] = m3.number_input("Total Minutes", min_value=0.0, step=0.5,
                                             value=float(entry["total_minutes"]), key=f"{k}_minutes")
    entry["approved_count"] = m4.number_input("Approved", min_value=0, step=1,
                                              value=int(entry["approved_count"]), key=f"{k}_approved")

    n1, n2, n3 = st.columns(3)
    entry["sf_note"] = n1.text_input("SF note", entry["sf_note"], key=f"{k}_sf_note")
    entry["lf_note"] = n2.text_input("LF note", entry["lf_note"], key=f"{k}_lf_note")
    entry["minutes_note"] = n3.text_input("Minutes note", entry["minutes_note"], key=f"{k}_minutes_note")

    entry["avg_reiterations"] = st.number_input("Avg Reiterations", min_value=0.0, step=0.1,
                                                value=float(entry["avg_reiterations"]), key=f"{k}_reiterations")
    entry["drive_links"] = st.text_area("Work Links", entry["drive_links"], placeholder="Paste links here...", key=f"{k}_links")
    entry["creative_inputs"] = st.text_area("Creative Inputs", entry["creative_inputs"], key=f"{k}_creative")

    entry["has_blockers"] = _yes_no("Any Blockers?", entry["has_blockers"], f"{k}_blockers")
    if entry["has_blockers"] == "Yes":
        entry["blocker_details"] = st.text_area("Blocker details", entry["blocker_details"], key=f"{k}_blocker_details")
    entry["has_qc_changes"] = _yes_no("QC Changes Repeated?", entry["has_qc_changes"], f"{k}_qc")
    if entry["has_qc_changes"] == "Yes":
        entry["qc_details"] = st.text_area("QC details", entry["qc_details"], key=f"{k}_qc_details")

    entry["improvements"] = st.text_area("IP Improvements", entry["improvements"], key=f"{k}_improvements")
    entry["manager_comments"] = st.text_area("Manager Comments", entry["manager_comments"], key=f"{k}_comments")


def render_report_form(store):
    user = store.get_current_user()
    if user is None:
        render_login(store)
        return

    st.title("📝 Weekly Performance Report")

    if "identity" not in st.session_state:
        st.session_state["identity"] = resolve_identity(store, user)
    identity = st.session_state["identity"]
    if "general" not in st.session_state:
        st.session_state["general"] = dict(GENERAL_DEFAULTS)
    general = st.session_state["general"]
    entries = _entries()

    col1, col2, col3 = st.columns(3)
    col1.text_input("Editor Name", identity.name, disabled=True)
    col2.text_input("YAAS ID", identity.yaas_id, disabled=True)
    col3.text_input("Email", identity.email, disabled=True)
    if not identity.yaas_id:
        st.warning("YAAS ID is missing. Contact Admin.")

    report_date = st.date_input("Select Date", value=date.today())
    labels = label_for(report_date)
    st.info(f"Period: **{labels.week_label}** ({week_range_label(report_date)})")

    _render_general(general)

    st.markdown("### 2. IP Related Questions")
    ip_options = fetch_project_options(store)
    tabs = st.tabs([f"IP {i + 1}" for i in range(len(entries))])
    for idx, (tab, entry) in enumerate(zip(tabs, entries)):
        with tab:
            _render_entry(entry, ip_options)
            if st.button("Remove this IP", key=f"{entry['uid']}_remove"):
                if len(entries) == 1:
                    st.warning("You need at least one IP.")
                else:
                    entries.pop(idx)
                    st.rerun()
    if st.button("➕ Add IP"):
        entries.append(_new_tab())
        st.rerun()

    st.markdown("---")
    if st.button("Submit Report", type="primary", use_container_width=True):
        try:
            submit_report(store, identity, report_date, general, entries)
        except SubmissionError as e:
            for problem in e.problems:
                st.error(problem)
        except StoreError as e:
            st.error(f"Error: {e}")
        else:
            st.success("✅ Report Submitted Successfully!")
            st.session_state["entries"] = [_new_tab()]
            st.session_state["general"] = dict(GENERAL_DEFAULTS)
            for key in [k for k in st.session_state if str(k).startswith("gen_")]:
                del st.session_state[key]
