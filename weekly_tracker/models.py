# weekly_tracker/models.py
"""Record types for reports as they come back from the store.

Rows from the store are loose dicts: newer reports carry the named daily
metrics (``sf_daily``, ``lf_daily``, ``total_minutes``, ``approved_count``),
older ones only the ``reels_delivered`` / ``approved_reels`` pair. Everything
downstream reads reports through these classes so the fallback between the
two shapes is decided in one place.
"""
from dataclasses import dataclass, field
from typing import Optional

LEGACY_SF_NOTE = "Legacy: reels delivered (pre-metrics report)"


def opt_number(value) -> Optional[float]:
    """None for missing/blank values, a number otherwise."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        num = float(text)
    except ValueError:
        return None
    return int(num) if num.is_integer() else num


def number(value, default=0):
    num = opt_number(value)
    return default if num is None else num


def clean_text(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


def is_flag_set(value) -> bool:
    if isinstance(value, bool):
        return value
    return clean_text(value).lower() in ("yes", "true", "1")


def yes_no(value) -> str:
    return "Yes" if is_flag_set(value) else "No"


@dataclass(frozen=True)
class ProjectEntry:
    ip_name: str = ""
    lead_editor: str = ""
    channel_manager: str = ""
    sf_daily: Optional[float] = None
    sf_note: str = ""
    lf_daily: Optional[float] = None
    lf_note: str = ""
    total_minutes: Optional[float] = None
    minutes_note: str = ""
    approved_count: Optional[float] = None
    creative_inputs: str = ""
    has_blockers: str = "No"
    blocker_details: str = ""
    has_qc_changes: str = "No"
    qc_details: str = ""
    avg_reiterations: float = 0
    improvements: str = ""
    drive_links: str = ""
    manager_comments: str = ""
    # pre-metrics reports
    reels_delivered: Optional[float] = None
    approved_reels: Optional[float] = None

    @classmethod
    def from_record(cls, record: dict) -> "ProjectEntry":
        record = record or {}
        return cls(
            ip_name=clean_text(record.get("ip_name")),
            lead_editor=clean_text(record.get("lead_editor")),
            channel_manager=clean_text(record.get("channel_manager")),
            sf_daily=opt_number(record.get("sf_daily")),
            sf_note=clean_text(record.get("sf_note")),
            lf_daily=opt_number(record.get("lf_daily")),
            lf_note=clean_text(record.get("lf_note")),
            total_minutes=opt_number(record.get("total_minutes")),
            minutes_note=clean_text(record.get("minutes_note")),
            approved_count=opt_number(record.get("approved_count")),
            creative_inputs=clean_text(record.get("creative_inputs")),
            has_blockers=yes_no(record.get("has_blockers")),
            blocker_details=clean_text(record.get("blocker_details")),
            has_qc_changes=yes_no(record.get("has_qc_changes")),
            qc_details=clean_text(record.get("qc_details")),
            avg_reiterations=number(record.get("avg_reiterations")),
            improvements=clean_text(record.get("improvements")),
            drive_links=clean_text(record.get("drive_links")),
            manager_comments=clean_text(record.get("manager_comments")),
            reels_delivered=opt_number(record.get("reels_delivered")),
            approved_reels=opt_number(record.get("approved_reels")),
        )

    def effective_sf(self) -> tuple:
        """Short-form count and its note, falling back to the legacy delivered count.

        The note is replaced by ``LEGACY_SF_NOTE`` whenever the legacy field
        supplied the value, so readers can label it as such.
        """
        if self.sf_daily is not None:
            return self.sf_daily, self.sf_note
        if self.reels_delivered is not None:
            return self.reels_delivered, LEGACY_SF_NOTE
        return 0, self.sf_note

    def effective_lf(self):
        return self.lf_daily if self.lf_daily is not None else 0

    def effective_minutes(self):
        return self.total_minutes if self.total_minutes is not None else 0

    def effective_approved(self):
        if self.approved_count is not None:
            return self.approved_count
        if self.approved_reels is not None:
            return self.approved_reels
        return 0

    def output_score(self):
        sf, _ = self.effective_sf()
        return sf + self.effective_lf()


@dataclass(frozen=True)
class Report:
    id: str = ""
    editor_name: str = ""
    editor_email: str = ""
    yaas_id: str = ""
    submission_date: str = ""
    week_label: str = ""
    month_label: str = ""
    hygiene_score: float = 0
    mistakes_repeated: bool = False
    mistake_details: str = ""
    delays: bool = False
    delay_reasons: str = ""
    general_improvements: str = ""
    next_week_commitment: float = 0
    areas_improvement: str = ""
    overall_feedback: str = ""
    ip_data: tuple = ()

    @classmethod
    def from_record(cls, record: dict) -> "Report":
        entries = record.get("ip_data") or []
        return cls(
            id=clean_text(record.get("id")),
            editor_name=clean_text(record.get("editor_name")),
            editor_email=clean_text(record.get("editor_email")),
            yaas_id=clean_text(record.get("yaas_id")),
            # timestamps from the bulk import keep only their date part
            submission_date=clean_text(record.get("submission_date"))[:10],
            week_label=clean_text(record.get("week_label")),
            month_label=clean_text(record.get("month_label")),
            hygiene_score=number(record.get("hygiene_score")),
            mistakes_repeated=is_flag_set(record.get("mistakes_repeated")),
            mistake_details=clean_text(record.get("mistake_details")),
            delays=is_flag_set(record.get("delays")),
            delay_reasons=clean_text(record.get("delay_reasons")),
            general_improvements=clean_text(record.get("general_improvements")),
            next_week_commitment=number(record.get("next_week_commitment")),
            areas_improvement=clean_text(record.get("areas_improvement")),
            overall_feedback=clean_text(record.get("overall_feedback")),
            ip_data=tuple(ProjectEntry.from_record(e) for e in entries),
        )

    def output_score(self):
        return sum(entry.output_score() for entry in self.ip_data)


@dataclass(frozen=True)
class RosterEntry:
    name: str
    email: str
    yaas_id: str = ""
    active: bool = True

    @classmethod
    def from_record(cls, record: dict) -> "RosterEntry":
        active = record.get("active")
        return cls(
            name=clean_text(record.get("name")),
            email=clean_text(record.get("email")),
            yaas_id=clean_text(record.get("yaas_id")),
            active=True if active is None else is_flag_set(active),
        )


@dataclass(frozen=True)
class EditorStatus:
    name: str
    email: str
    yaas_id: str
    has_submitted: bool
    weekly_score: Optional[float] = None
    report_id: Optional[str] = None


@dataclass(frozen=True)
class Stats:
    total_reports: int
    avg_hygiene: str
    total_sf: float = 0
    total_lf: float = 0
    total_approved: float = 0
    total_minutes: float = 0
    legacy_entries: int = 0
    projects: list = field(default_factory=list)
