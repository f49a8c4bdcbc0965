"""
Shared fixtures for session and audit tests.
"""

from __future__ import annotations

from typing import Iterable, Mapping

import pytest
import structlog

from avalon_workspace.audit import ACTIVITY_LOG_KEY
from avalon_workspace.config import DEFAULT_ROSTER
from avalon_workspace.errors import PersistenceFailure
from avalon_workspace.metrics import MetricsCollector
from avalon_workspace.roster import Roster
from avalon_workspace.session import SessionManager
from avalon_workspace.storage import MemoryStore


class FlakyStore(MemoryStore):
    """MemoryStore that fails writes/reads for chosen keys."""

    def __init__(self, *, fail_writes: Iterable[str] = (), fail_reads: Iterable[str] = (), **kw):
        super().__init__(**kw)
        self.fail_writes = set(fail_writes)
        self.fail_reads = set(fail_reads)

    def get(self, key: str):
        if key in self.fail_reads:
            raise PersistenceFailure(f"read of {key} failed")
        return super().get(key)

    def set_many(self, items: Mapping[str, str]) -> None:
        if self.fail_writes & set(items):
            raise PersistenceFailure("quota exceeded")
        super().set_many(items)

    def remove_many(self, keys: Iterable[str]) -> None:
        keys = list(keys)
        if self.fail_writes & set(keys):
            raise PersistenceFailure("quota exceeded")
        super().remove_many(keys)


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()


@pytest.fixture
def roster() -> Roster:
    return DEFAULT_ROSTER.to_roster()


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def metrics() -> MetricsCollector:
    return MetricsCollector()


@pytest.fixture
def navigation() -> list[str]:
    return []


@pytest.fixture
def make_session(roster, navigation, metrics):
    def _make(store, *, restore: bool = True) -> SessionManager:
        session = SessionManager(roster, store, navigate=navigation.append, metrics=metrics)
        if restore:
            session.restore()
        return session

    return _make


@pytest.fixture
def session(make_session, store) -> SessionManager:
    return make_session(store)


@pytest.fixture
def audit_failing_store() -> FlakyStore:
    return FlakyStore(fail_writes=[ACTIVITY_LOG_KEY])
