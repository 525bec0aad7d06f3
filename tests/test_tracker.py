from conftest import make_entry, make_report
from weekly_tracker.models import Report, RosterEntry
from weekly_tracker.tracker import filter_statuses, join_roster, submission_summary

ROSTER = [
    RosterEntry("Alice", "alice@example.com", "YA-1"),
    RosterEntry("Bob", "bob@example.com", "YA-2"),
    RosterEntry("Cara", "cara@example.com", ""),
]


def _reports(*records):
    return [Report.from_record(r) for r in records]


def test_one_status_per_roster_entry_in_order():
    reports = _reports(make_report("r1", email="bob@example.com", name="Bob"))
    statuses = join_roster(ROSTER, reports)
    assert [s.name for s in statuses] == ["Alice", "Bob", "Cara"]
    assert [s.has_submitted for s in statuses] == [False, True, False]
    assert statuses[1].report_id == "r1"
    assert statuses[0].weekly_score is None


def test_email_match_is_exact():
    reports = _reports(make_report("r1", email="Alice@Example.com"))
    assert not join_roster(ROSTER, reports)[0].has_submitted


def test_first_report_wins():
    reports = _reports(
        make_report("r1", entries=[make_entry(sf_daily=1, lf_daily=1)]),
        make_report("r2", entries=[make_entry(sf_daily=10, lf_daily=10)]),
    )
    alice = join_roster(ROSTER, reports)[0]
    assert alice.report_id == "r1"
    assert alice.weekly_score == 2


def test_score_sums_all_entries_with_legacy_fallback():
    reports = _reports(make_report("r1", entries=[
        make_entry(sf_daily=3, lf_daily=2),
        {"ip_name": "Old", "reels_delivered": 4},
    ]))
    assert join_roster(ROSTER, reports)[0].weekly_score == 9


def test_reports_from_unknown_editors_are_ignored():
    reports = _reports(make_report("r1", email="stranger@example.com", name="Stranger"))
    statuses = join_roster(ROSTER, reports)
    assert len(statuses) == 3
    assert not any(s.has_submitted for s in statuses)


def test_filters():
    statuses = join_roster(ROSTER, _reports(make_report("r1")))
    assert [s.name for s in filter_statuses(statuses, status="Submitted")] == ["Alice"]
    assert [s.name for s in filter_statuses(statuses, status="Missing")] == ["Bob", "Cara"]
    assert [s.name for s in filter_statuses(statuses, search="ya-2")] == ["Bob"]
    assert [s.name for s in filter_statuses(statuses, search="CA")] == ["Cara"]
    assert filter_statuses(statuses, search="bob", status="Submitted") == []


def test_summary():
    statuses = join_roster(ROSTER, _reports(make_report("r1")))
    summary = submission_summary(statuses)
    assert summary["total"] == 3
    assert summary["submitted"] == 1
    assert summary["missing"] == 2
    assert round(summary["completion_pct"], 1) == 33.3
    assert submission_summary([])["completion_pct"] == 0.0
