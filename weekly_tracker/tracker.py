# weekly_tracker/tracker.py
"""Who has and hasn't submitted for a week."""
from .models import EditorStatus

STATUS_OPTIONS = ["All", "Submitted", "Missing"]


def join_roster(roster, reports) -> list:
    """One status per roster entry, in roster order.

    Emails are compared exactly; when an editor has several reports for the
    week the first one in ``reports`` is used.
    """
    by_email = {}
    for report in reports:
        by_email.setdefault(report.editor_email, report)

    statuses = []
    for member in roster:
        report = by_email.get(member.email)
        statuses.append(EditorStatus(
            name=member.name,
            email=member.email,
            yaas_id=member.yaas_id,
            has_submitted=report is not None,
            weekly_score=report.output_score() if report is not None else None,
            report_id=report.id if report is not None else None,
        ))
    return statuses


def filter_statuses(statuses, search="", status="All") -> list:
    needle = (search or "").strip().lower()
    out = []
    for s in statuses:
        if needle and needle not in s.name.lower() and needle not in s.yaas_id.lower():
            continue
        if status == "Submitted" and not s.has_submitted:
            continue
        if status == "Missing" and s.has_submitted:
            continue
        out.append(s)
    return out


def submission_summary(statuses) -> dict:
    total = len(statuses)
    submitted = sum(1 for s in statuses if s.has_submitted)
    return {
        "total": total,
        "submitted": submitted,
        "missing": total - submitted,
        "completion_pct": 100.0 * submitted / total if total else 0.0,
    }
