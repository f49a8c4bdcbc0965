"""Kanban task schema shared by the board, calendar and analysis screens."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .common import (
    LEGACY_AREAS,
    LEGACY_COLUMNS,
    LEGACY_PRIORITIES,
    ColumnId,
    TaskArea,
    TaskPriority,
)
from .validation import ValidationResult, parse_record, validate_record


def _migrate_label(value: Any, legacy: dict) -> Any:
    if isinstance(value, str) and value in legacy:
        return legacy[value]
    return value


class Task(BaseModel):
    """A card on the board."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = Field(min_length=1)
    priority: TaskPriority
    area: List[TaskArea] = Field(min_length=1)
    start_date: Optional[date] = Field(default=None, alias="startDate")
    due_date: Optional[date] = Field(default=None, alias="dueDate")
    column_id: ColumnId = Field(alias="columnId")

    @field_validator("priority", mode="before")
    @classmethod
    def _legacy_priority(cls, v: Any) -> Any:
        return _migrate_label(v, LEGACY_PRIORITIES)

    @field_validator("column_id", mode="before")
    @classmethod
    def _legacy_column(cls, v: Any) -> Any:
        return _migrate_label(v, LEGACY_COLUMNS)

    @field_validator("area", mode="before")
    @classmethod
    def _legacy_areas(cls, v: Any) -> Any:
        if isinstance(v, (list, tuple, set, frozenset)):
            return [_migrate_label(item, LEGACY_AREAS) for item in v]
        return v

    @field_validator("area")
    @classmethod
    def _dedupe_areas(cls, v: List[TaskArea]) -> List[TaskArea]:
        # A task's areas form a set; keep first-seen order for display.
        return list(dict.fromkeys(v))

    @field_validator("start_date", "due_date", mode="before")
    @classmethod
    def _truncate_timestamps(cls, v: Any) -> Any:
        # Browser Date objects serialise as full ISO instants.
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, str) and "T" in v:
            return datetime.fromisoformat(v).date()
        return v


def validate_task(raw: Any) -> ValidationResult[Task]:
    return validate_record(Task, raw)


def parse_task(raw: Any) -> Task:
    return parse_record(Task, raw, "task")
