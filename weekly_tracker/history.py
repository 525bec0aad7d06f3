# weekly_tracker/history.py
from decimal import ROUND_HALF_UP, Decimal

import pandas as pd

from .models import Report, Stats
from .weeks import to_date


def within_range(reports, start=None, end=None) -> list:
    """Reports whose submission date falls in [start, end]; open ends are unbounded."""
    start, end = to_date(start), to_date(end)
    kept = []
    for report in reports:
        day = to_date(report.submission_date)
        if day is None:
            continue
        if start is not None and day < start:
            continue
        if end is not None and day > end:
            continue
        kept.append(report)
    return kept


def _one_decimal(value) -> str:
    # half-up, so 8.25 reads "8.3"
    return str(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def aggregate(reports):
    """Lifetime counters over the given reports, or None when there are none."""
    reports = [r if isinstance(r, Report) else Report.from_record(r) for r in reports]
    if not reports:
        return None

    total_sf = total_lf = total_approved = total_minutes = 0
    legacy_entries = 0
    projects = []
    for report in reports:
        for entry in report.ip_data:
            sf, _ = entry.effective_sf()
            if entry.sf_daily is None and entry.reels_delivered is not None:
                legacy_entries += 1
            total_sf += sf
            total_lf += entry.effective_lf()
            total_approved += entry.effective_approved()
            total_minutes += entry.effective_minutes()
            if entry.ip_name and entry.ip_name not in projects:
                projects.append(entry.ip_name)

    avg = sum(r.hygiene_score for r in reports) / len(reports)
    return Stats(
        total_reports=len(reports),
        avg_hygiene=_one_decimal(avg),
        total_sf=total_sf,
        total_lf=total_lf,
        total_approved=total_approved,
        total_minutes=total_minutes,
        legacy_entries=legacy_entries,
        projects=projects,
    )


def hygiene_trend(reports) -> pd.DataFrame:
    rows = [{
        "Date": pd.to_datetime(r.submission_date, errors="coerce"),
        "Week": r.week_label,
        "Hygiene": r.hygiene_score,
        "Output": r.output_score(),
    } for r in reports]
    df = pd.DataFrame(rows, columns=["Date", "Week", "Hygiene", "Output"])
    return df.dropna(subset=["Date"]).sort_values("Date").reset_index(drop=True)
