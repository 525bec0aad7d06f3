# weekly_tracker/data_loader.py
import logging

import httpx
import streamlit as st
from postgrest.exceptions import APIError
from supabase import create_client

from .models import Report, RosterEntry
from .settings import settings

logger = logging.getLogger(__name__)

REPORTS_TABLE = "reports"
REGISTRY_TABLE = "editor_registry"
PROJECTS_TABLE = "ips"
PROFILES_TABLE = "profiles"


class StoreError(Exception):
    """Raised when the hosted store rejects or fails a request."""


def _error_message(exc) -> str:
    return getattr(exc, "message", None) or str(exc)


class RecordStore:
    """Thin wrapper over a Supabase client: predicate queries, inserts, current user."""

    def __init__(self, client):
        self.client = client

    def query(self, table, eq=None, gte=None, lte=None, order=None, desc=False) -> list:
        try:
            q = self.client.table(table).select("*")
            for column, value in (eq or {}).items():
                q = q.eq(column, value)
            for column, value in (gte or {}).items():
                q = q.gte(column, value)
            for column, value in (lte or {}).items():
                q = q.lte(column, value)
            if order:
                q = q.order(order, desc=desc)
            response = q.execute()
        except (APIError, httpx.HTTPError) as exc:
            raise StoreError(_error_message(exc)) from exc
        return response.data or []

    def insert(self, table, record: dict) -> dict:
        try:
            response = self.client.table(table).insert(record).execute()
        except (APIError, httpx.HTTPError) as exc:
            raise StoreError(_error_message(exc)) from exc
        return response.data[0] if response.data else record

    def get_current_user(self):
        session = self.client.auth.get_session()
        if session is None or session.user is None:
            return None
        user = session.user
        return {
            "id": user.id,
            "email": user.email or "",
            "name": (user.user_metadata or {}).get("full_name", ""),
        }

    def sign_in(self, email, password):
        try:
            self.client.auth.sign_in_with_password({"email": email, "password": password})
        except Exception as exc:
            raise StoreError(_error_message(exc)) from exc
        return self.get_current_user()

    def sign_out(self):
        self.client.auth.sign_out()


def get_store() -> RecordStore:
    # One client per browser session: the client also carries the auth session.
    if "record_store" not in st.session_state:
        if not settings.supabase_url or not settings.supabase_key:
            raise StoreError("SUPABASE_URL and SUPABASE_KEY must be set.")
        client = create_client(settings.supabase_url, settings.supabase_key)
        st.session_state["record_store"] = RecordStore(client)
    return st.session_state["record_store"]


class FetchGuard:
    """Generation counter per view key.

    Every fetch takes a generation from ``begin``; its result is applied only if
    ``accept`` still sees it as the latest one started for that key, so a slow
    response cannot overwrite the data of a newer selection.
    """

    def __init__(self):
        self._latest = {}

    def begin(self, key) -> int:
        generation = self._latest.get(key, 0) + 1
        self._latest[key] = generation
        return generation

    def accept(self, key, generation) -> bool:
        return self._latest.get(key) == generation


def guarded_fetch(key, fetch):
    """Run ``fetch`` and keep its result for view ``key`` unless a newer fetch started meanwhile."""
    guard = st.session_state.setdefault("fetch_guard", FetchGuard())
    generation = guard.begin(key)
    result = fetch()
    if guard.accept(key, generation):
        st.session_state[f"view_{key}"] = result
    return st.session_state.get(f"view_{key}", [])


# ---------------- Readers (fail soft: empty result on store errors) ----------------
def fetch_roster(store) -> list:
    try:
        rows = store.query(REGISTRY_TABLE, eq={"active": True}, order="name")
    except StoreError as exc:
        logger.warning("Failed to load editor registry: %s", exc)
        return []
    return [RosterEntry.from_record(r) for r in rows]


def lookup_registry(store, email):
    if not email:
        return None
    try:
        rows = store.query(REGISTRY_TABLE, eq={"email": email})
    except StoreError as exc:
        logger.warning("Registry lookup failed for %s: %s", email, exc)
        return None
    return RosterEntry.from_record(rows[0]) if rows else None


def lookup_profile_id(store, email):
    """Auth profile id registered for an email, or None."""
    if not email:
        return None
    try:
        rows = store.query(PROFILES_TABLE, eq={"email": email})
    except StoreError as exc:
        logger.warning("Profile lookup failed for %s: %s", email, exc)
        return None
    return rows[0].get("id") if rows else None


def fetch_reports_for_week(store, week_label) -> list:
    if not week_label:
        return []
    try:
        rows = store.query(REPORTS_TABLE, eq={"week_label": week_label},
                           order="submission_date", desc=True)
    except StoreError as exc:
        logger.warning("Failed to load reports for %s: %s", week_label, exc)
        return []
    return [Report.from_record(r) for r in rows]


def fetch_reports_for_editor(store, email, start=None, end=None) -> list:
    if not email:
        return []
    gte = {"submission_date": str(start)} if start else None
    lte = {"submission_date": str(end)} if end else None
    try:
        rows = store.query(REPORTS_TABLE, eq={"editor_email": email}, gte=gte, lte=lte,
                           order="submission_date", desc=True)
    except StoreError as exc:
        logger.warning("Failed to load history for %s: %s", email, exc)
        return []
    return [Report.from_record(r) for r in rows]


def fetch_project_options(store) -> list:
    try:
        rows = store.query(PROJECTS_TABLE, eq={"active": True}, order="name")
    except StoreError as exc:
        logger.warning("Failed to load project list: %s", exc)
        return []
    return [r["name"] for r in rows if r.get("name")]


# ---------------- Writer (errors propagate to the caller) ----------------
def insert_report(store, record: dict) -> dict:
    saved = store.insert(REPORTS_TABLE, record)
    logger.info("Stored report for %s (%s)", record.get("editor_email"), record.get("week_label"))
    return saved
