"""
Activity log persistence.

The log lives under the ``activityLog`` key as a JSON array, newest entry
first. Appends made on behalf of login/logout are best-effort: a storage or
serialisation failure is logged and counted, never raised.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Callable, Optional

import structlog

from avalon_shared.schemas import ActivityLog, AuditAction, new_id, to_record, validate_activity

from .errors import PersistenceFailure
from .metrics import MetricsCollector
from .storage import KeyValueStore

log = structlog.get_logger()

ACTIVITY_LOG_KEY = "activityLog"

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ActivityLogStore:
    """Reads and writes the authentication audit trail."""

    def __init__(
        self,
        store: KeyValueStore,
        *,
        clock: Clock = utcnow,
        metrics: MetricsCollector | None = None,
    ):
        self._store = store
        self._clock = clock
        self._metrics = metrics or MetricsCollector()

    # --- Reads ---

    def _records(self) -> list:
        """Stored records as-is. Corrupt or non-list data reads as empty.

        Raises PersistenceFailure when the store cannot be read.
        """
        raw = self._store.get(ACTIVITY_LOG_KEY)
        if not raw:
            return []
        try:
            records = json.loads(raw)
        except ValueError as exc:
            log.warning("audit.corrupted", error=str(exc))
            return []
        if not isinstance(records, list):
            log.warning("audit.corrupted", error="activity log is not a list")
            return []
        return records

    def entries(self) -> list[ActivityLog]:
        """All valid entries, newest first. Unreadable data reads as an empty log."""
        try:
            records = self._records()
        except PersistenceFailure as exc:
            self._metrics.inc("persistence_failures_total")
            log.warning("audit.read_failed", error=str(exc))
            return []

        entries: list[ActivityLog] = []
        for record in records:
            result = validate_activity(record)
            if result.ok:
                entries.append(result.entity)
            else:
                log.warning("audit.entry_dropped", fields=result.fields())
        return entries

    def latest(self) -> Optional[ActivityLog]:
        entries = self.entries()
        return entries[0] if entries else None

    # --- Writes ---

    def append(self, username: str, action: AuditAction) -> Optional[ActivityLog]:
        """Prepend an entry. Returns None if it could not be stored.

        Existing records are written back untouched, including ones that
        ``entries()`` would skip.
        """
        entry = ActivityLog(
            id=new_id(),
            username=username,
            action=action,
            timestamp=self._clock(),
        )
        try:
            records = self._records()
            self._write([to_record(entry), *records])
        except (PersistenceFailure, TypeError, ValueError) as exc:
            self._metrics.inc("audit_write_failures_total")
            log.warning(
                "audit.write_failed",
                username=username,
                action=action.value,
                error=str(exc),
            )
            return None
        log.debug("audit.appended", username=username, action=action.value)
        return entry

    def delete(self, entry_id: str) -> bool:
        """Remove one entry. Returns False if no entry had that id."""
        records = self._records()
        remaining = [
            r for r in records if not (isinstance(r, dict) and r.get("id") == entry_id)
        ]
        if len(remaining) == len(records):
            return False
        self._write(remaining)
        log.info("audit.entry_deleted", entry_id=entry_id)
        return True

    def clear(self) -> None:
        self._write([])
        log.info("audit.cleared")

    def _write(self, records: list) -> None:
        self._store.set(ACTIVITY_LOG_KEY, json.dumps(records))
