"""
Authenticated-user lifecycle.

A ``SessionManager`` is created per process (or per test) and handed to
whatever needs it: route guards, screens, the CLI. States:

    LOADING --restore()--> AUTHENTICATED | UNAUTHENTICATED
    UNAUTHENTICATED --login()--> AUTHENTICATED
    AUTHENTICATED --login()--> AUTHENTICATED (re-authentication)
    AUTHENTICATED --logout()--> UNAUTHENTICATED

Persisted keys: ``username`` (plain name) and ``isAuthenticated`` ("true").
Audit logging and storage writes never block a state transition; failures
are logged and counted.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Optional

import structlog
from pydantic import BaseModel

from avalon_shared.schemas import AuditAction

from .audit import ActivityLogStore
from .errors import PersistenceFailure, SessionStateError
from .metrics import MetricsCollector
from .roster import Roster
from .storage import KeyValueStore

log = structlog.get_logger()

USERNAME_KEY = "username"
AUTH_FLAG_KEY = "isAuthenticated"
AUTH_FLAG_VALUE = "true"

INVALID_CREDENTIALS = "Invalid credentials"

Navigator = Callable[[str], None]


class SessionState(str, Enum):
    LOADING = "loading"
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"


class SessionSnapshot(BaseModel):
    """What route guards poll."""
    is_authenticated: bool
    username: Optional[str] = None
    loading: bool


class LoginResult(BaseModel):
    success: bool
    username: Optional[str] = None
    error: Optional[str] = None
    redirect_to: Optional[str] = None


def _no_navigation(path: str) -> None:
    log.debug("session.navigate", path=path)


class SessionManager:
    """Owns authentication state and writes the audit trail."""

    def __init__(
        self,
        roster: Roster,
        store: KeyValueStore,
        *,
        audit: ActivityLogStore | None = None,
        navigate: Navigator | None = None,
        default_route: str = "/kanban",
        login_route: str = "/login",
        metrics: MetricsCollector | None = None,
    ):
        self._roster = roster
        self._store = store
        self._metrics = metrics or MetricsCollector()
        self._audit = audit or ActivityLogStore(store, metrics=self._metrics)
        self._navigate = navigate or _no_navigation
        self.default_route = default_route
        self.login_route = login_route

        self._state = SessionState.LOADING
        self._username: Optional[str] = None

    # --- Queries ---

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def loading(self) -> bool:
        return self._state is SessionState.LOADING

    @property
    def is_authenticated(self) -> bool:
        return self._state is SessionState.AUTHENTICATED

    @property
    def username(self) -> Optional[str]:
        return self._username

    @property
    def is_admin(self) -> bool:
        return self.is_authenticated and self._roster.is_admin(self._username)

    @property
    def roster(self) -> Roster:
        return self._roster

    @property
    def store(self) -> KeyValueStore:
        return self._store

    @property
    def audit(self) -> ActivityLogStore:
        return self._audit

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            is_authenticated=self.is_authenticated,
            username=self._username,
            loading=self.loading,
        )

    # --- Boot ---

    def restore(self) -> SessionSnapshot:
        """Resolve the boot-time LOADING state from durable storage.

        Does not write an audit entry; restoring is not a login.
        """
        if not self.loading:
            return self.snapshot()

        username: Optional[str] = None
        try:
            persisted = self._store.get(USERNAME_KEY)
            flag = self._store.get(AUTH_FLAG_KEY)
        except PersistenceFailure as exc:
            self._metrics.inc("persistence_failures_total")
            log.warning("session.restore_failed", error=str(exc))
        else:
            if persisted and flag == AUTH_FLAG_VALUE:
                if persisted in self._roster:
                    username = persisted
                else:
                    log.info("session.restore_rejected", username=persisted)

        if username is None:
            self._set_unauthenticated()
        else:
            self._set_authenticated(username)
            log.info("session.restored", username=username)
        return self.snapshot()

    # --- Login / logout ---

    def attempt_login(self, username: str, password: str) -> LoginResult:
        if self.loading:
            raise SessionStateError("login called before the session was restored")

        if not self._roster.check(username, password):
            self._metrics.inc("login_failures_total")
            log.info("session.login_failed")
            return LoginResult(success=False, error=INVALID_CREDENTIALS)

        previous = self._username
        self._set_authenticated(username)
        try:
            self._store.set_many({USERNAME_KEY: username, AUTH_FLAG_KEY: AUTH_FLAG_VALUE})
        except PersistenceFailure as exc:
            self._metrics.inc("persistence_failures_total")
            log.warning("session.persist_failed", username=username, error=str(exc))

        self._audit.append(username, AuditAction.LOGIN)
        self._metrics.inc("logins_total")
        log.info("session.login", username=username, replaced=previous)

        self._navigate(self.default_route)
        return LoginResult(success=True, username=username, redirect_to=self.default_route)

    def login(self, username: str, password: str) -> bool:
        return self.attempt_login(username, password).success

    def logout(self) -> None:
        """End the session. Safe to call when nobody is logged in.

        Raises SessionStateError while the session is still loading.
        """
        if self.loading:
            raise SessionStateError("logout called before the session was restored")

        try:
            username = self._store.get(USERNAME_KEY)
        except PersistenceFailure as exc:
            self._metrics.inc("persistence_failures_total")
            log.warning("session.logout_read_failed", error=str(exc))
            username = self._username

        if username:
            self._audit.append(username, AuditAction.LOGOUT)

        try:
            self._store.remove_many([AUTH_FLAG_KEY, USERNAME_KEY])
        except PersistenceFailure as exc:
            self._metrics.inc("persistence_failures_total")
            log.warning("session.clear_failed", error=str(exc))

        self._set_unauthenticated()
        self._metrics.inc("logouts_total")
        log.info("session.logout", username=username)
        self._navigate(self.login_route)

    # --- Internal ---

    def _set_authenticated(self, username: str) -> None:
        self._username = username
        self._state = SessionState.AUTHENTICATED

    def _set_unauthenticated(self) -> None:
        self._username = None
        self._state = SessionState.UNAUTHENTICATED
