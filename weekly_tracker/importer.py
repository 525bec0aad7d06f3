# weekly_tracker/importer.py
"""One-off import of historical reports pasted from the old spreadsheet.

The sheet has one row per (editor, week, IP); rows sharing Email + Week are
folded into a single report. Inserts are best effort: a failed insert is
logged and counted, the rest still go through.
"""
import io
import json
import logging
import re
from dataclasses import dataclass, field
from datetime import date

import pandas as pd

from .data_loader import StoreError, insert_report, lookup_profile_id
from .models import clean_text
from .weeks import label_for

logger = logging.getLogger(__name__)

NUMBER_PREFIX = re.compile(r"^\s*[-+]?(\d+(\.\d*)?|\.\d+)([eE][-+]?\d+)?")


class ImportParseError(ValueError):
    """The pasted text could not be read as a table."""


@dataclass
class ImportTally:
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    errors: list = field(default_factory=list)


def parse_num(value):
    match = NUMBER_PREFIX.match(clean_text(value))
    if not match:
        return 0
    num = float(match.group(0))
    return int(num) if num.is_integer() else num


def is_yes(value) -> bool:
    return "yes" in clean_text(value).lower()


def parse_date(value) -> str:
    parsed = pd.to_datetime(clean_text(value) or None, errors="coerce")
    if pd.isna(parsed):
        return date.today().isoformat()
    return parsed.date().isoformat()


def parse_pasted_table(text, on_bad_line=None) -> list:
    """Rows from a JSON array, or from tab/comma separated text with a header line.

    A row with more cells than the header (an unquoted separator inside a
    free-text cell) is dropped and passed to ``on_bad_line``; the other rows
    are still returned.
    """
    text = (text or "").strip()
    if not text:
        raise ImportParseError("Nothing to import.")

    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        data = None
    if data is not None:
        if not isinstance(data, list):
            raise ImportParseError("JSON input must be an array of rows.")
        return [row for row in data if isinstance(row, dict)]

    lines = text.splitlines()
    if len(lines) < 2:
        raise ImportParseError("Not enough data. Need headers and rows.")
    separator = "\t" if "\t" in lines[0] else ","

    def drop_line(cells):
        logger.warning("Dropped malformed row: %s", separator.join(cells))
        if on_bad_line:
            on_bad_line(cells)
        return None

    # header read as a plain row, so the row width is fixed by it
    try:
        df = pd.read_csv(io.StringIO(text), sep=separator, header=None, dtype=str,
                         keep_default_na=False, engine="python", on_bad_lines=drop_line)
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        raise ImportParseError(f"Could not read the pasted table: {exc}") from exc

    header = df.iloc[0].fillna("").str.strip()
    df = df.iloc[1:].reset_index(drop=True)
    df.columns = header
    # short trailing rows come back as NaN
    df = df.fillna("").apply(lambda col: col.str.strip())
    return df.to_dict(orient="records")


def _report_from_row(row: dict) -> dict:
    labels = label_for(row.get("Timestamp"))
    return {
        "editor_name": clean_text(row.get("Name")),
        "editor_email": clean_text(row.get("Email")),
        "yaas_id": clean_text(row.get("YAAS ID")),
        "submission_date": parse_date(row.get("Timestamp")),
        "week_label": clean_text(row.get("Week")) or labels.week_label,
        "month_label": clean_text(row.get("Month")) or labels.month_label,
        "hygiene_score": parse_num(row.get("Hygiene Score")),
        "mistakes_repeated": is_yes(row.get("Mistakes Repeated?")),
        "mistake_details": clean_text(row.get("Mistake Details")),
        "delays": is_yes(row.get("Delays?")),
        "delay_reasons": clean_text(row.get("Delay Reasons")),
        "general_improvements": clean_text(row.get("General Improvements")),
        "next_week_commitment": parse_num(row.get("Next Week Target (Reels/Animations)")),
        "areas_improvement": clean_text(row.get("Areas for Improvement")),
        "overall_feedback": clean_text(row.get("Self Reflection")),
        "ip_data": [],
    }


def _entry_from_row(row: dict) -> dict:
    # old sheets only know delivered/approved reels
    return {
        "ip_name": clean_text(row.get("IP Name")),
        "lead_editor": clean_text(row.get("Lead Editor")),
        "channel_manager": clean_text(row.get("Channel Manager")),
        "reels_delivered": parse_num(row.get("Reels/Animations Delivered")),
        "approved_reels": parse_num(row.get("Approved")),
        "creative_inputs": clean_text(row.get("Creative Inputs")),
        "has_blockers": "Yes" if is_yes(row.get("Blockers?")) else "No",
        "blocker_details": clean_text(row.get("Blocker Details")),
        "avg_reiterations": parse_num(row.get("Avg Reiterations")),
        "has_qc_changes": "Yes" if is_yes(row.get("QC Changes Repeated?")) else "No",
        "qc_details": clean_text(row.get("QC Details")),
        "improvements": clean_text(row.get("IP Improvements")),
        "drive_links": clean_text(row.get("Work Links")),
        "manager_comments": clean_text(row.get("IP Manager Comments")),
    }


def group_rows(rows) -> tuple:
    """Fold sheet rows into report records keyed by Email + Week.

    Returns ``(reports, skipped)``; rows with neither an email nor a name have
    no usable key and are skipped.
    """
    grouped = {}
    skipped = 0
    for row in rows:
        email = clean_text(row.get("Email"))
        if not email and not clean_text(row.get("Name")):
            skipped += 1
            continue
        report = _report_from_row(row)
        key = f"{email}-{report['week_label']}"
        report = grouped.setdefault(key, report)
        if clean_text(row.get("IP Name")):
            report["ip_data"].append(_entry_from_row(row))
    return list(grouped.values()), skipped


def import_reports(store, reports, on_result=None) -> ImportTally:
    tally = ImportTally()
    for report in reports:
        # link to the editor's account when one exists
        report = {**report, "user_id": lookup_profile_id(store, report.get("editor_email"))}
        try:
            insert_report(store, report)
        except StoreError as exc:
            logger.error("Import failed for %s (%s): %s",
                         report.get("editor_name"), report.get("week_label"), exc)
            tally.failed += 1
            tally.errors.append(f"{report.get('editor_name')}: {exc}")
            if on_result:
                on_result(report, str(exc))
        else:
            tally.succeeded += 1
            if on_result:
                on_result(report, None)
    return tally


def run_import(store, text, on_result=None) -> ImportTally:
    dropped = []
    rows = parse_pasted_table(text, on_bad_line=dropped.append)
    reports, skipped = group_rows(rows)
    logger.info("Grouped %d pasted rows into %d reports (%d skipped, %d malformed)",
                len(rows), len(reports), skipped, len(dropped))
    tally = import_reports(store, reports, on_result=on_result)
    tally.skipped = skipped + len(dropped)
    return tally
