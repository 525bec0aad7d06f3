"""Shared fixtures: an in-memory record store and sample report rows."""
import itertools

import pytest

from weekly_tracker.data_loader import StoreError


class FakeStore:
    """Stands in for RecordStore: same query/insert interface over plain lists."""

    def __init__(self, tables=None, fail_reads=False, reject=None):
        self.tables = {name: list(rows) for name, rows in (tables or {}).items()}
        self.fail_reads = fail_reads
        self.reject = reject
        self.inserts = []
        self.user = None
        self._ids = itertools.count(1)

    def query(self, table, eq=None, gte=None, lte=None, order=None, desc=False):
        if self.fail_reads:
            raise StoreError("connection refused")
        rows = list(self.tables.get(table, []))
        for column, value in (eq or {}).items():
            rows = [r for r in rows if r.get(column) == value]
        for column, value in (gte or {}).items():
            rows = [r for r in rows if str(r.get(column)) >= value]
        for column, value in (lte or {}).items():
            rows = [r for r in rows if str(r.get(column)) <= value]
        if order:
            rows.sort(key=lambda r: r.get(order), reverse=desc)
        return rows

    def insert(self, table, record):
        if self.reject is not None and self.reject(record):
            raise StoreError(f"insert rejected for {record.get('editor_email')}")
        saved = {"id": str(next(self._ids)), **record}
        self.tables.setdefault(table, []).append(saved)
        self.inserts.append((table, saved))
        return saved

    def get_current_user(self):
        return self.user


def make_entry(ip_name="Alpha Show", **overrides):
    entry = {
        "ip_name": ip_name,
        "lead_editor": "Lead",
        "channel_manager": "Manager",
        "sf_daily": 2,
        "sf_note": "",
        "lf_daily": 1,
        "lf_note": "",
        "total_minutes": 30,
        "minutes_note": "",
        "approved_count": 2,
        "creative_inputs": "",
        "has_blockers": "No",
        "blocker_details": "",
        "has_qc_changes": "No",
        "qc_details": "",
        "improvements": "",
        "drive_links": "https://drive.example.com/file/1",
        "manager_comments": "",
    }
    entry.update(overrides)
    return entry


def make_report(report_id="r1", email="alice@example.com", name="Alice", entries=None, **overrides):
    report = {
        "id": report_id,
        "editor_name": name,
        "editor_email": email,
        "yaas_id": "YA-" + name.upper(),
        "submission_date": "2024-01-03",
        "week_label": "Week 1 - January 2024",
        "month_label": "January",
        "hygiene_score": 9,
        "mistakes_repeated": False,
        "mistake_details": "",
        "delays": False,
        "delay_reasons": "",
        "general_improvements": "",
        "next_week_commitment": 5,
        "areas_improvement": "",
        "overall_feedback": "",
        "ip_data": [make_entry()] if entries is None else entries,
    }
    report.update(overrides)
    return report


@pytest.fixture
def store():
    return FakeStore()
