# weekly_tracker/submission.py
import logging
from dataclasses import dataclass
from typing import Optional

from .data_loader import insert_report, lookup_registry
from .models import clean_text, is_flag_set, number, yes_no
from .weeks import label_for, to_date

logger = logging.getLogger(__name__)

GENERAL_DEFAULTS = {
    "hygiene_score": 10,
    "mistakes_repeated": "No",
    "mistake_details": "",
    "delays": "No",
    "delay_reasons": "",
    "general_improvements": "",
    "next_week_commitment": 0,
    "areas_improvement": "",
    "overall_feedback": "",
}

ENTRY_DEFAULTS = {
    "ip_name": "",
    "lead_editor": "",
    "channel_manager": "",
    "sf_daily": 0,
    "sf_note": "",
    "lf_daily": 0,
    "lf_note": "",
    "total_minutes": 0,
    "minutes_note": "",
    "approved_count": 0,
    "creative_inputs": "",
    "has_blockers": "No",
    "blocker_details": "",
    "avg_reiterations": 0,
    "has_qc_changes": "No",
    "qc_details": "",
    "improvements": "",
    "drive_links": "",
    "manager_comments": "",
}

ENTRY_NUMBER_FIELDS = ("sf_daily", "lf_daily", "total_minutes", "approved_count", "avg_reiterations")
ENTRY_FLAG_FIELDS = ("has_blockers", "has_qc_changes")


@dataclass(frozen=True)
class EditorIdentity:
    name: str
    email: str
    yaas_id: str = ""
    user_id: Optional[str] = None


class SubmissionError(Exception):
    """A report failed validation; ``problems`` lists every reason."""

    def __init__(self, problems):
        self.problems = list(problems)
        super().__init__("; ".join(self.problems))


def new_entry() -> dict:
    return dict(ENTRY_DEFAULTS)


def validate_submission(identity, submission_date, general, entries) -> list:
    problems = []
    if not clean_text(identity.yaas_id):
        problems.append("YAAS ID is missing. Contact Admin.")
    if to_date(submission_date) is None:
        problems.append("Select a valid report date.")

    score = number(general.get("hygiene_score"), default=None)
    if score is None or not 0 <= score <= 10 or (score * 2) % 1:
        problems.append("Hygiene score must be between 0 and 10, in steps of 0.5.")
    if is_flag_set(general.get("mistakes_repeated")) and not clean_text(general.get("mistake_details")):
        problems.append("Describe the repeated mistakes.")
    if is_flag_set(general.get("delays")) and not clean_text(general.get("delay_reasons")):
        problems.append("Give the reason for the delays.")

    if not entries:
        problems.append("You need at least one IP.")
    for idx, entry in enumerate(entries, start=1):
        tag = f"IP {idx}"
        if not clean_text(entry.get("ip_name")):
            problems.append(f"{tag}: select an IP name.")
        if not clean_text(entry.get("drive_links")):
            problems.append(f"{tag}: add at least one work link.")
        if is_flag_set(entry.get("has_blockers")) and not clean_text(entry.get("blocker_details")):
            problems.append(f"{tag}: describe the blockers.")
        if is_flag_set(entry.get("has_qc_changes")) and not clean_text(entry.get("qc_details")):
            problems.append(f"{tag}: describe the repeated QC changes.")
        delivered = number(entry.get("sf_daily")) + number(entry.get("lf_daily"))
        if number(entry.get("approved_count")) > delivered:
            problems.append(f"{tag}: approved count cannot be higher than delivered.")
    return problems


def _entry_record(entry: dict) -> dict:
    record = {}
    for key, default in ENTRY_DEFAULTS.items():
        value = entry.get(key, default)
        if key in ENTRY_NUMBER_FIELDS:
            record[key] = number(value)
        elif key in ENTRY_FLAG_FIELDS:
            record[key] = yes_no(value)
        else:
            record[key] = clean_text(value)
    return record


def build_report(identity, submission_date, general, entries) -> dict:
    """Assemble the row stored in ``reports``; labels are fixed at this point."""
    day = to_date(submission_date)
    labels = label_for(day)
    general = {**GENERAL_DEFAULTS, **(general or {})}
    return {
        "editor_name": identity.name,
        "editor_email": identity.email,
        "yaas_id": identity.yaas_id,
        "user_id": identity.user_id,
        "submission_date": day.isoformat() if day else "",
        "week_label": labels.week_label,
        "month_label": labels.month_label,
        "hygiene_score": number(general["hygiene_score"]),
        "mistakes_repeated": is_flag_set(general["mistakes_repeated"]),
        "mistake_details": clean_text(general["mistake_details"]),
        "delays": is_flag_set(general["delays"]),
        "delay_reasons": clean_text(general["delay_reasons"]),
        "general_improvements": clean_text(general["general_improvements"]),
        "next_week_commitment": number(general["next_week_commitment"]),
        "areas_improvement": clean_text(general["areas_improvement"]),
        "overall_feedback": clean_text(general["overall_feedback"]),
        "ip_data": [_entry_record(e) for e in entries],
    }


def submit_report(store, identity, submission_date, general, entries) -> dict:
    """Validate, build and insert one new report. Store errors are not retried."""
    problems = validate_submission(identity, submission_date, general, entries)
    if problems:
        logger.info("Rejected report from %s: %d problem(s)", identity.email, len(problems))
        raise SubmissionError(problems)
    record = build_report(identity, submission_date, general, entries)
    return insert_report(store, record)


def resolve_identity(store, user) -> EditorIdentity:
    """Fill the editor's display name and YAAS ID from the registry."""
    email = clean_text((user or {}).get("email"))
    name = clean_text((user or {}).get("name"))
    user_id = (user or {}).get("id")
    registry = lookup_registry(store, email)
    if registry is None:
        return EditorIdentity(name=name, email=email, user_id=user_id)
    return EditorIdentity(name=registry.name or name, email=email, yaas_id=registry.yaas_id, user_id=user_id)
