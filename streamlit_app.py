import streamlit as st
from streamlit_autorefresh import st_autorefresh

from weekly_tracker.admin_dashboard import render_admin_dashboard
from weekly_tracker.data_import import render_data_import
from weekly_tracker.data_loader import StoreError, get_store
from weekly_tracker.editor_history import render_editor_history
from weekly_tracker.logger import setup_logging
from weekly_tracker.report_form import render_report_form
from weekly_tracker.settings import settings
from weekly_tracker.submission_tracker import render_submission_tracker

st.set_page_config(page_title="Weekly Tracker", page_icon="📊", layout="wide")
setup_logging(settings.log_level)

try:
    store = get_store()
except StoreError as e:
    st.error(f"Record store is not configured: {e}")
    st.stop()

# Sidebar Navigation
st.sidebar.title("📊 Weekly Tracker")
page = st.sidebar.radio("Go to", [
    "Submit Report", "Submission Tracker", "Admin Dashboard", "Editor History", "Import Data"
])

user = store.get_current_user()
if user is not None:
    st.sidebar.caption(f"Signed in as {user['email']}")
    if st.sidebar.button("Sign Out"):
        store.sign_out()
        st.session_state.clear()
        st.rerun()

# Admin views pick up new submissions without a manual reload
if page in ("Submission Tracker", "Admin Dashboard"):
    st_autorefresh(interval=settings.refresh_interval_ms, key="data_refresh")

if page == "Submit Report":
    render_report_form(store)

elif page == "Submission Tracker":
    render_submission_tracker(store)

elif page == "Admin Dashboard":
    render_admin_dashboard(store)

elif page == "Editor History":
    render_editor_history(store)

elif page == "Import Data":
    render_data_import(store)

# Footer
st.markdown("---")
st.caption("Reports are labelled by ISO week number; the week range shown is Monday to Sunday.")
