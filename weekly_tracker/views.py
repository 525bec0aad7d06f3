# weekly_tracker/views.py
"""Table views over a week's reports.

``flatten_reports`` turns reports into one row per project entry and
``process_rows`` applies search, column filters, sorting and row grouping on
top. Both return new frames and leave their inputs untouched, so the admin
page can recompute them on every rerun from the same fetched reports.
"""
import io
import re
from dataclasses import dataclass, replace

import numpy as np
import pandas as pd

from .models import Report

PLACEHOLDER_TEXT = "-"

GENERAL_COLUMNS = [
    "submission_date", "week_label", "editor_name", "editor_email", "yaas_id",
    "hygiene_score", "mistakes_repeated", "mistake_details", "delays", "delay_reasons",
    "general_improvements", "next_week_commitment", "areas_improvement", "overall_feedback",
]
ENTRY_COLUMNS = [
    "ip_name", "lead_editor", "channel_manager",
    "sf_daily", "sf_note", "lf_daily", "lf_note", "total_minutes", "minutes_note",
    "approved_count", "creative_inputs", "has_blockers", "blocker_details",
    "has_qc_changes", "qc_details", "avg_reiterations", "improvements",
    "drive_links", "manager_comments",
]
ENTRY_NUMERIC_COLUMNS = ["sf_daily", "lf_daily", "total_minutes", "approved_count", "avg_reiterations"]
DISPLAY_COLUMNS = GENERAL_COLUMNS + ENTRY_COLUMNS
FLAT_COLUMNS = ["row_id", "report_id"] + DISPLAY_COLUMNS

SEARCH_COLUMNS = ["editor_name", "yaas_id", "ip_name"]
# Sorting by these keeps a report's rows together, so they can be shown as one block.
GROUPED_SORT_KEYS = frozenset({"editor_name", "yaas_id", "submission_date"})

COLUMN_LABELS = {
    "submission_date": "Date",
    "week_label": "Week",
    "editor_name": "Editor",
    "editor_email": "Email",
    "yaas_id": "YAAS ID",
    "hygiene_score": "Hygiene",
    "mistakes_repeated": "Mistakes Repeated",
    "mistake_details": "Mistake Details",
    "delays": "Delays",
    "delay_reasons": "Delay Reasons",
    "general_improvements": "General Improvements",
    "next_week_commitment": "Next Week Commitment",
    "areas_improvement": "Areas for Improvement",
    "overall_feedback": "Overall Feedback",
    "ip_name": "IP",
    "lead_editor": "Lead Editor",
    "channel_manager": "Manager",
    "sf_daily": "SF Daily",
    "sf_note": "SF Note",
    "lf_daily": "LF Daily",
    "lf_note": "LF Note",
    "total_minutes": "Total Minutes",
    "minutes_note": "Minutes Note",
    "approved_count": "Approved",
    "creative_inputs": "Creative Inputs",
    "has_blockers": "Blockers",
    "blocker_details": "Blocker Details",
    "has_qc_changes": "QC Repeated",
    "qc_details": "QC Details",
    "avg_reiterations": "Avg Reiterations",
    "improvements": "IP Improvements",
    "drive_links": "Links",
    "manager_comments": "Manager Comments",
}


def _as_report(report):
    return report if isinstance(report, Report) else Report.from_record(report)


def _general_fields(report: Report) -> dict:
    return {
        "submission_date": report.submission_date,
        "week_label": report.week_label,
        "editor_name": report.editor_name,
        "editor_email": report.editor_email,
        "yaas_id": report.yaas_id,
        "hygiene_score": report.hygiene_score,
        "mistakes_repeated": "Yes" if report.mistakes_repeated else "No",
        "mistake_details": report.mistake_details,
        "delays": "Yes" if report.delays else "No",
        "delay_reasons": report.delay_reasons,
        "general_improvements": report.general_improvements,
        "next_week_commitment": report.next_week_commitment,
        "areas_improvement": report.areas_improvement,
        "overall_feedback": report.overall_feedback,
    }


def _entry_fields(entry) -> dict:
    sf, sf_note = entry.effective_sf()
    return {
        "ip_name": entry.ip_name,
        "lead_editor": entry.lead_editor,
        "channel_manager": entry.channel_manager,
        "sf_daily": sf,
        "sf_note": sf_note,
        "lf_daily": entry.effective_lf(),
        "lf_note": entry.lf_note,
        "total_minutes": entry.effective_minutes(),
        "minutes_note": entry.minutes_note,
        "approved_count": entry.effective_approved(),
        "creative_inputs": entry.creative_inputs,
        "has_blockers": entry.has_blockers,
        "blocker_details": entry.blocker_details,
        "has_qc_changes": entry.has_qc_changes,
        "qc_details": entry.qc_details,
        "avg_reiterations": entry.avg_reiterations,
        "improvements": entry.improvements,
        "drive_links": entry.drive_links,
        "manager_comments": entry.manager_comments,
    }


def _placeholder_fields() -> dict:
    return {col: (0 if col in ENTRY_NUMERIC_COLUMNS else PLACEHOLDER_TEXT) for col in ENTRY_COLUMNS}


def flatten_reports(reports) -> pd.DataFrame:
    rows = []
    for report in map(_as_report, reports):
        general = _general_fields(report)
        if not report.ip_data:
            rows.append({"row_id": f"{report.id}_0", "report_id": report.id,
                         **general, **_placeholder_fields()})
            continue
        for idx, entry in enumerate(report.ip_data):
            rows.append({"row_id": f"{report.id}_{idx}", "report_id": report.id,
                         **general, **_entry_fields(entry)})
    return pd.DataFrame(rows, columns=FLAT_COLUMNS)


@dataclass(frozen=True)
class SortConfig:
    key: str = "submission_date"
    direction: str = "desc"

    @property
    def ascending(self) -> bool:
        return self.direction == "asc"

    @property
    def grouped(self) -> bool:
        return self.key in GROUPED_SORT_KEYS

    def toggle(self, key):
        """Same key flips the direction; a new key starts ascending."""
        if key == self.key:
            return replace(self, direction="asc" if self.direction == "desc" else "desc")
        return SortConfig(key=key, direction="asc")


def _contains(series: pd.Series, needle: str) -> pd.Series:
    return series.astype(str).str.lower().str.contains(needle, regex=False)


def process_rows(rows: pd.DataFrame, global_search="", column_filters=None, sort=None) -> pd.DataFrame:
    """Filter, sort and group flattened rows.

    The result has a ``row_span`` column: with grouping active the first row of
    each run of rows from the same report holds the run length and the other
    rows hold 0 (their report columns are hidden on display). Without grouping
    every row spans 1.
    """
    df = rows.copy()

    needle = (global_search or "").strip().lower()
    if needle:
        mask = pd.Series(False, index=df.index)
        for col in SEARCH_COLUMNS:
            mask |= _contains(df[col], needle)
        df = df[mask]

    for field, value in (column_filters or {}).items():
        value = str(value or "").strip().lower()
        if not value or field not in df.columns:
            continue
        df = df[_contains(df[field], value)]

    if sort is not None and sort.key in df.columns:
        df = df.sort_values(sort.key, ascending=sort.ascending, kind="stable")
    df = df.reset_index(drop=True)

    if sort is not None and sort.grouped and not df.empty:
        ids = df["report_id"]
        run = (ids != ids.shift()).cumsum()
        run_length = run.map(run.value_counts())
        df["row_span"] = np.where(run != run.shift(), run_length, 0)
    else:
        df["row_span"] = 1
    return df


def to_display_frame(processed: pd.DataFrame) -> pd.DataFrame:
    df = processed.copy()
    if "row_span" in df.columns:
        hidden = df["row_span"] == 0
        df[GENERAL_COLUMNS] = df[GENERAL_COLUMNS].astype(object)
        df.loc[hidden, GENERAL_COLUMNS] = ""
    return df.reindex(columns=DISPLAY_COLUMNS).rename(columns=COLUMN_LABELS)


def project_totals(rows: pd.DataFrame) -> pd.DataFrame:
    real = rows[rows["ip_name"] != PLACEHOLDER_TEXT]
    totals = real.groupby("ip_name", as_index=False)[["sf_daily", "lf_daily", "approved_count"]].sum()
    return totals.rename(columns={"ip_name": "IP", "sf_daily": "SF", "lf_daily": "LF",
                                  "approved_count": "Approved"})


# ---------------- Spreadsheet export ----------------
def export_filename(week_label) -> str:
    safe = re.sub(r"[^A-Za-z0-9]", "_", week_label or "") or "all"
    return f"Weekly_Reports_{safe}.xlsx"


def export_workbook(rows: pd.DataFrame) -> bytes:
    frame = rows.reindex(columns=DISPLAY_COLUMNS).rename(columns=COLUMN_LABELS)
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        frame.to_excel(writer, sheet_name="Reports", index=False)
    return buffer.getvalue()
