"""
Tests for the session manager.

Covers:
- Login success/failure and audit entries
- Logout ordering and idempotence
- Boot-time restore
- Re-authentication
- Best-effort persistence
"""

from __future__ import annotations

import pytest
from structlog.testing import capture_logs

from avalon_shared.schemas import AuditAction
from avalon_workspace.errors import SessionStateError
from avalon_workspace.session import (
    AUTH_FLAG_KEY,
    INVALID_CREDENTIALS,
    USERNAME_KEY,
    SessionManager,
    SessionState,
)
from avalon_workspace.storage import MemoryStore, SqliteStore

from conftest import FlakyStore


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------

class TestLogin:
    def test_valid_credentials(self, session, store, navigation):
        assert session.login("Davi", "jesuscura10") is True
        assert session.is_authenticated
        assert session.username == "Davi"
        assert store.get(USERNAME_KEY) == "Davi"
        assert store.get(AUTH_FLAG_KEY) == "true"

        entries = session.audit.entries()
        assert len(entries) == 1
        assert entries[0].action is AuditAction.LOGIN
        assert entries[0].username == "Davi"
        assert navigation == ["/kanban"]

    def test_wrong_password(self, session, store, navigation):
        assert session.login("Davi", "wrong") is False
        assert session.state is SessionState.UNAUTHENTICATED
        assert session.username is None
        assert session.audit.entries() == []
        assert store.keys() == []
        assert navigation == []

    def test_failure_keeps_existing_session(self, session):
        session.login("Carol", "123456")
        assert session.login("Davi", "wrong") is False
        assert session.username == "Carol"
        assert len(session.audit.entries()) == 1

    def test_failure_message_does_not_reveal_field(self, session):
        unknown_user = session.attempt_login("Nobody", "123456")
        wrong_password = session.attempt_login("Carol", "654321")
        assert unknown_user == wrong_password
        assert unknown_user.error == INVALID_CREDENTIALS

    def test_comparison_is_case_sensitive(self, session):
        assert not session.login("davi", "jesuscura10")
        assert not session.login("Davi", "JESUSCURA10")

    def test_result_carries_redirect(self, session):
        result = session.attempt_login("Miguel", "123456")
        assert result.success
        assert result.redirect_to == "/kanban"

    def test_login_before_restore_raises(self, make_session, store):
        session = make_session(store, restore=False)
        with pytest.raises(SessionStateError):
            session.login("Davi", "jesuscura10")

    def test_reauthentication_as_other_user(self, session, store):
        session.login("Davi", "jesuscura10")
        assert session.login("Carol", "123456")
        assert session.username == "Carol"
        assert store.get(USERNAME_KEY) == "Carol"
        entries = session.audit.entries()
        assert [(e.username, e.action) for e in entries] == [
            ("Carol", AuditAction.LOGIN),
            ("Davi", AuditAction.LOGIN),
        ]

    def test_counts_logins(self, session, metrics):
        session.login("Davi", "jesuscura10")
        session.login("Davi", "nope")
        assert metrics.get("logins_total") == 1
        assert metrics.get("login_failures_total") == 1


# ---------------------------------------------------------------------------
# Logout
# ---------------------------------------------------------------------------

class TestLogout:
    def test_login_then_logout(self, session, store, navigation):
        session.login("Davi", "jesuscura10")
        session.logout()

        assert session.state is SessionState.UNAUTHENTICATED
        assert session.username is None
        assert store.get(USERNAME_KEY) is None
        assert store.get(AUTH_FLAG_KEY) is None

        latest, previous = session.audit.entries()[:2]
        assert latest.action is AuditAction.LOGOUT
        assert previous.action is AuditAction.LOGIN
        assert latest.username == previous.username == "Davi"
        assert navigation == ["/kanban", "/login"]

    def test_logout_without_session(self, session, navigation):
        session.logout()
        assert session.audit.entries() == []
        assert not session.is_authenticated
        assert navigation == ["/login"]

    def test_logout_before_restore_raises(self, make_session, store, navigation):
        store.set_many({USERNAME_KEY: "Davi", AUTH_FLAG_KEY: "true"})
        session = make_session(store, restore=False)
        with pytest.raises(SessionStateError):
            session.logout()
        assert session.loading
        assert store.get(USERNAME_KEY) == "Davi"
        assert session.audit.entries() == []
        assert navigation == []

    def test_logout_uses_persisted_username(self, make_session):
        store = MemoryStore({USERNAME_KEY: "Thiago"})
        session = make_session(store)
        session.logout()
        entry = session.audit.latest()
        assert entry.username == "Thiago"
        assert entry.action is AuditAction.LOGOUT

    def test_logout_falls_back_to_memory_when_storage_unreadable(self, make_session):
        store = FlakyStore()
        session = make_session(store)
        session.login("Italo", "123456")
        store.fail_reads.add(USERNAME_KEY)
        session.logout()
        store.fail_reads.clear()
        assert session.audit.latest().username == "Italo"
        assert not session.is_authenticated


# ---------------------------------------------------------------------------
# Restore
# ---------------------------------------------------------------------------

class TestRestore:
    def test_starts_loading(self, make_session, store):
        session = make_session(store, restore=False)
        snap = session.snapshot()
        assert snap.loading is True
        assert snap.is_authenticated is False

    def test_restores_persisted_member(self, make_session):
        store = MemoryStore({USERNAME_KEY: "Davi", AUTH_FLAG_KEY: "true"})
        session = make_session(store, restore=False)
        snap = session.restore()
        assert snap.loading is False
        assert snap.is_authenticated is True
        assert snap.username == "Davi"
        assert session.audit.entries() == []

    def test_removed_user_is_not_restored(self, make_session):
        store = MemoryStore({USERNAME_KEY: "Ghost", AUTH_FLAG_KEY: "true"})
        session = make_session(store, restore=False)
        snap = session.restore()
        assert snap.loading is False
        assert snap.is_authenticated is False
        assert session.state is SessionState.UNAUTHENTICATED

    def test_missing_marker_is_not_restored(self, make_session):
        session = make_session(MemoryStore({USERNAME_KEY: "Davi"}))
        assert not session.is_authenticated

    def test_unreadable_storage_resolves_unauthenticated(self, make_session):
        store = FlakyStore(fail_reads=[USERNAME_KEY])
        session = make_session(store, restore=False)
        snap = session.restore()
        assert snap.loading is False
        assert not snap.is_authenticated

    def test_restore_only_resolves_once(self, session, store):
        session.login("Davi", "jesuscura10")
        store.remove(USERNAME_KEY)
        assert session.restore().username == "Davi"

    def test_survives_restart(self, roster, tmp_path):
        db = str(tmp_path / "workspace.db")
        with SqliteStore(db) as store:
            first = SessionManager(roster, store)
            first.restore()
            first.login("Lorenzo", "123456")

        with SqliteStore(db) as store:
            second = SessionManager(roster, store)
            assert second.restore().username == "Lorenzo"
            assert len(second.audit.entries()) == 1


# ---------------------------------------------------------------------------
# Best-effort persistence
# ---------------------------------------------------------------------------

class TestPersistenceFailures:
    def test_audit_failure_does_not_block_login(
        self, make_session, audit_failing_store, metrics
    ):
        session = make_session(audit_failing_store)
        with capture_logs() as logs:
            assert session.login("Davi", "jesuscura10") is True
        assert session.is_authenticated
        assert audit_failing_store.get(USERNAME_KEY) == "Davi"
        assert any(e["event"] == "audit.write_failed" for e in logs)
        assert metrics.get("audit_write_failures_total") == 1

    def test_audit_failure_does_not_block_logout(self, make_session, audit_failing_store):
        session = make_session(audit_failing_store)
        session.login("Davi", "jesuscura10")
        session.logout()
        assert not session.is_authenticated
        assert audit_failing_store.get(USERNAME_KEY) is None

    def test_session_write_failure_still_authenticates(self, make_session, metrics):
        store = FlakyStore(fail_writes=[USERNAME_KEY])
        session = make_session(store)
        assert session.login("Davi", "jesuscura10")
        assert session.username == "Davi"
        assert store.get(AUTH_FLAG_KEY) is None
        assert metrics.get("persistence_failures_total") == 1


def test_admin_flag(session):
    session.login("Carol", "123456")
    assert not session.is_admin
    session.login("Davi", "jesuscura10")
    assert session.is_admin
    session.logout()
    assert not session.is_admin
