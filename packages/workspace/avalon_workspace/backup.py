"""
Workspace backup export/import.

A backup is a JSON object mapping known storage keys to their parsed
values. Importing merges id-bearing lists by ``id`` (imported records win)
and overwrites everything else.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Mapping

import structlog

from .audit import ACTIVITY_LOG_KEY
from .errors import BackupError
from .storage import KeyValueStore

log = structlog.get_logger()

BACKUP_KEYS: tuple[str, ...] = (
    "kanbanTasks",
    "customRoulettes",
    "pairingRouletteHistory",
    "decodeEvaluations",
    "coreValuesTeams",
    "drawingCanvasState",
    "ticTacToeState",
    "memoryGameState",
    "flappyBirdHighScore",
    "roundsHistory",
    "innovationProjectScores_v2",
    "robotDesignScores_v2",
    "chatMessages",
    "customNotifications",
    "chatMuted",
    "strategyMapImage",
    "strategyHistory",
    "strategySteps",
    "strategyResources",
    "attachments",
    ACTIVITY_LOG_KEY,
)

# Lists of {"id": ...} records
MERGE_KEYS: frozenset[str] = frozenset(
    {
        "kanbanTasks",
        "customRoulettes",
        "pairingRouletteHistory",
        "decodeEvaluations",
        "coreValuesTeams",
        "roundsHistory",
        "chatMessages",
        "customNotifications",
        "attachments",
        ACTIVITY_LOG_KEY,
    }
)


def export_backup(store: KeyValueStore) -> dict[str, Any]:
    """Collect every known key present in ``store``."""
    data: dict[str, Any] = {}
    for key in BACKUP_KEYS:
        value = store.get(key)
        if value is None:
            continue
        try:
            data[key] = json.loads(value)
        except ValueError:
            data[key] = value
    log.info("backup.exported", keys=sorted(data))
    return data


def _merge_by_id(existing: list, imported: list) -> list:
    merged: dict[Any, Any] = {}
    for item in [*existing, *imported]:
        if isinstance(item, dict) and "id" in item:
            merged[item["id"]] = item
    return list(merged.values())


_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def _entry_time(item: Any) -> datetime:
    try:
        ts = datetime.fromisoformat(item["timestamp"])
    except (KeyError, TypeError, ValueError):
        return _OLDEST
    return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)


def _newest_first(entries: list) -> list:
    return sorted(entries, key=_entry_time, reverse=True)


def import_backup(store: KeyValueStore, data: Mapping[str, Any]) -> list[str]:
    """Restore a backup into ``store``. Returns the keys written."""
    if not isinstance(data, Mapping) or not any(k in BACKUP_KEYS for k in data):
        raise BackupError("Not a workspace backup: no known keys found")

    updates: dict[str, str] = {}
    for key, value in data.items():
        if key not in BACKUP_KEYS:
            log.debug("backup.key_skipped", key=key)
            continue

        if key in MERGE_KEYS and isinstance(value, list):
            current_raw = store.get(key)
            try:
                current = json.loads(current_raw) if current_raw else []
            except ValueError:
                current = None
            if isinstance(current, list):
                value = _merge_by_id(current, value)
        if key == ACTIVITY_LOG_KEY and isinstance(value, list):
            value = _newest_first(value)

        updates[key] = json.dumps(value)

    store.set_many(updates)
    log.info("backup.imported", keys=sorted(updates))
    return sorted(updates)
