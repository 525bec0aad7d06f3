# weekly_tracker/data_import.py
import streamlit as st

from .importer import ImportParseError, run_import


def render_data_import(store):
    st.title("📥 Import Data")

    st.markdown("**Copy your entire Excel/Sheet data (including headers) and paste it below.** "
                "Rows are grouped into one report per Email + Week automatically.")
    text = st.text_area("Pasted data", height=260,
                        placeholder="Timestamp, Name, Email, YAAS ID, Week, Month, Hygiene Score, IP Name, ...")

    if not st.button("Start Import", type="primary"):
        return

    log = st.container()

    def on_result(report, error):
        if error:
            log.write(f"❌ Error ({report.get('editor_name')}): {error}")

    try:
        with st.spinner("Importing..."):
            tally = run_import(store, text, on_result=on_result)
    except ImportParseError as e:
        st.error(f"CRITICAL ERROR: {e}")
        return

    if tally.skipped:
        st.warning(f"Skipped {tally.skipped} row(s) that were malformed or had no Email or Name.")
    message = f"DONE! Imported: {tally.succeeded}, Failed: {tally.failed}"
    if tally.failed:
        st.warning(message)
    else:
        st.success(f"✅ {message}")
