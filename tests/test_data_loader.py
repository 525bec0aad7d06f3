from types import SimpleNamespace

import httpx
import pytest
from postgrest.exceptions import APIError

import weekly_tracker.data_loader as data_loader
from conftest import FakeStore, make_report
from weekly_tracker.data_loader import (
    PROFILES_TABLE, PROJECTS_TABLE, REGISTRY_TABLE, REPORTS_TABLE, FetchGuard, RecordStore, StoreError,
    fetch_project_options, fetch_reports_for_editor, fetch_reports_for_week, fetch_roster,
    guarded_fetch, insert_report, lookup_profile_id, lookup_registry,
)


class FakeQuery:
    def __init__(self, client, table):
        self.client = client
        self.calls = [("table", table)]

    def __getattr__(self, name):
        if name not in ("select", "insert", "eq", "gte", "lte", "order"):
            raise AttributeError(name)

        def step(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self
        return step

    def execute(self):
        self.client.executed.append(self.calls)
        if self.client.error is not None:
            raise self.client.error
        return SimpleNamespace(data=self.client.data)


class FakeClient:
    def __init__(self, data=None, error=None, session=None):
        self.data = data
        self.error = error
        self.executed = []
        self.auth = SimpleNamespace(get_session=lambda: session)

    def table(self, name):
        return FakeQuery(self, name)


class TestRecordStore:

    def test_query_builds_the_filter_chain(self):
        client = FakeClient(data=[{"id": 1}])
        rows = RecordStore(client).query("reports", eq={"editor_email": "a@x.com"},
                                         gte={"submission_date": "2024-01-01"},
                                         order="submission_date", desc=True)
        assert rows == [{"id": 1}]
        calls = client.executed[0]
        assert calls[0] == ("table", "reports")
        assert ("eq", ("editor_email", "a@x.com"), {}) in calls
        assert ("gte", ("submission_date", "2024-01-01"), {}) in calls
        assert calls[-1] == ("order", ("submission_date",), {"desc": True})

    def test_query_without_data_is_empty(self):
        assert RecordStore(FakeClient(data=None)).query("reports") == []

    def test_api_error_becomes_store_error(self):
        client = FakeClient(error=APIError({"message": "relation does not exist", "code": "42P01"}))
        with pytest.raises(StoreError, match="relation does not exist"):
            RecordStore(client).query("reports")

    def test_network_error_becomes_store_error(self):
        client = FakeClient(error=httpx.ConnectError("connection refused"))
        with pytest.raises(StoreError):
            RecordStore(client).insert("reports", {"editor_email": "a@x.com"})

    def test_insert_returns_stored_row(self):
        client = FakeClient(data=[{"id": "9", "editor_email": "a@x.com"}])
        assert RecordStore(client).insert("reports", {"editor_email": "a@x.com"})["id"] == "9"

    def test_current_user(self):
        user = SimpleNamespace(id="u1", email="a@x.com", user_metadata={"full_name": "Alice"})
        store = RecordStore(FakeClient(session=SimpleNamespace(user=user)))
        assert store.get_current_user() == {"id": "u1", "email": "a@x.com", "name": "Alice"}

    def test_no_session_means_no_user(self):
        assert RecordStore(FakeClient(session=None)).get_current_user() is None


class TestFetchGuard:

    def test_only_latest_generation_is_accepted(self):
        guard = FetchGuard()
        slow = guard.begin("admin")
        fast = guard.begin("admin")
        assert guard.accept("admin", fast)
        assert not guard.accept("admin", slow)

    def test_keys_are_independent(self):
        guard = FetchGuard()
        admin = guard.begin("admin")
        guard.begin("tracker")
        assert guard.accept("admin", admin)

    def test_unknown_key_rejected(self):
        assert not FetchGuard().accept("admin", 1)


class TestGuardedFetch:

    @pytest.fixture(autouse=True)
    def session(self, monkeypatch):
        state = {}
        monkeypatch.setattr(data_loader, "st", SimpleNamespace(session_state=state))
        return state

    def test_result_kept_for_the_view(self, session):
        assert guarded_fetch("admin", lambda: ["week 1"]) == ["week 1"]
        assert session["view_admin"] == ["week 1"]

    def test_superseded_result_is_discarded(self, session):
        guarded_fetch("admin", lambda: ["week 1"])

        def slow_fetch():
            # a newer fetch for the same view starts and lands first
            newer = session["fetch_guard"].begin("admin")
            session["view_admin"] = ["week 3"]
            assert session["fetch_guard"].accept("admin", newer)
            return ["week 2"]

        assert guarded_fetch("admin", slow_fetch) == ["week 3"]
        assert session["view_admin"] == ["week 3"]

    def test_other_views_unaffected(self, session):
        guarded_fetch("tracker", lambda: ["t"])
        assert guarded_fetch("admin", lambda: ["a"]) == ["a"]
        assert session["view_tracker"] == ["t"]


class TestReaders:

    def test_roster_only_active_sorted_by_name(self):
        store = FakeStore({REGISTRY_TABLE: [
            {"name": "Zed", "email": "z@x.com", "yaas_id": "YA-3", "active": True},
            {"name": "Gone", "email": "g@x.com", "yaas_id": "YA-4", "active": False},
            {"name": "Amy", "email": "a@x.com", "yaas_id": "YA-1", "active": True},
        ]})
        assert [m.name for m in fetch_roster(store)] == ["Amy", "Zed"]

    def test_week_reports_match_label_exactly(self):
        store = FakeStore({REPORTS_TABLE: [
            make_report("r1", week_label="Week 1 - January 2024"),
            make_report("r2", week_label="Week 10 - March 2024"),
        ]})
        reports = fetch_reports_for_week(store, "Week 1 - January 2024")
        assert [r.id for r in reports] == ["r1"]
        assert fetch_reports_for_week(store, "") == []

    def test_editor_reports_newest_first_within_range(self):
        store = FakeStore({REPORTS_TABLE: [
            make_report("r1", submission_date="2024-01-03"),
            make_report("r2", submission_date="2024-02-07"),
            make_report("r3", submission_date="2024-03-06"),
            make_report("r4", email="bob@example.com", submission_date="2024-02-07"),
        ]})
        reports = fetch_reports_for_editor(store, "alice@example.com", "2024-01-01", "2024-02-29")
        assert [r.id for r in reports] == ["r2", "r1"]

    def test_profile_id(self):
        store = FakeStore({PROFILES_TABLE: [{"id": "u-7", "email": "alice@example.com"}]})
        assert lookup_profile_id(store, "alice@example.com") == "u-7"
        assert lookup_profile_id(store, "bob@example.com") is None
        assert lookup_profile_id(store, "") is None

    def test_project_options(self):
        store = FakeStore({PROJECTS_TABLE: [
            {"name": "Beta", "active": True}, {"name": "Alpha", "active": True}, {"name": "Old", "active": False},
        ]})
        assert fetch_project_options(store) == ["Alpha", "Beta"]

    def test_reads_fail_soft(self):
        store = FakeStore(fail_reads=True)
        assert fetch_roster(store) == []
        assert fetch_reports_for_week(store, "Week 1 - January 2024") == []
        assert fetch_reports_for_editor(store, "alice@example.com") == []
        assert fetch_project_options(store) == []
        assert lookup_registry(store, "alice@example.com") is None
        assert lookup_profile_id(store, "alice@example.com") is None


def test_insert_errors_propagate():
    store = FakeStore(reject=lambda record: True)
    with pytest.raises(StoreError):
        insert_report(store, make_report())
