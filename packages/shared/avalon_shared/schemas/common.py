"""Closed enumerations shared by every workspace screen."""

from __future__ import annotations

import uuid
from enum import Enum
from typing import Optional


class TaskPriority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class ColumnId(str, Enum):
    PLANNING = "Planning"
    TODO = "To Do"
    DOING = "Doing"
    DONE = "Done"
    REVIEW = "Review"
    IMPROVEMENT = "Improvement"


class TaskArea(str, Enum):
    INNOVATION_PROJECT = "Innovation Project"
    BUILD = "Build"
    PROGRAMMING = "Programming"
    CORE_VALUES = "Core Values"


class AuditAction(str, Enum):
    LOGIN = "login"
    LOGOUT = "logout"


# Read-only views for building selection UI
PRIORITIES: tuple[TaskPriority, ...] = tuple(TaskPriority)
AREAS: tuple[TaskArea, ...] = tuple(TaskArea)

# Ordered workflow, left to right on the board
COLUMNS: tuple[ColumnId, ...] = (
    ColumnId.PLANNING,
    ColumnId.TODO,
    ColumnId.DOING,
    ColumnId.DONE,
    ColumnId.REVIEW,
    ColumnId.IMPROVEMENT,
)

# Labels written by the earlier Portuguese UI -> current members
LEGACY_PRIORITIES: dict[str, TaskPriority] = {
    "Baixa": TaskPriority.LOW,
    "Média": TaskPriority.MEDIUM,
    "Alta": TaskPriority.HIGH,
}

LEGACY_COLUMNS: dict[str, ColumnId] = {
    "Planejamento": ColumnId.PLANNING,
    "Fazer": ColumnId.TODO,
    "Fazendo": ColumnId.DOING,
    "Feito": ColumnId.DONE,
    "Análise": ColumnId.REVIEW,
    "Aprimoramento": ColumnId.IMPROVEMENT,
}

LEGACY_AREAS: dict[str, TaskArea] = {
    "Projeto de Inovação": TaskArea.INNOVATION_PROJECT,
    "Construção": TaskArea.BUILD,
    "Programação": TaskArea.PROGRAMMING,
}


def column_index(column: ColumnId | str) -> int:
    """Position of a column in the workflow (0 = Planning)."""
    return COLUMNS.index(ColumnId(column))


def next_column(column: ColumnId | str) -> Optional[ColumnId]:
    """The stage after ``column``, or None at the end of the workflow."""
    idx = column_index(column)
    if idx + 1 >= len(COLUMNS):
        return None
    return COLUMNS[idx + 1]


def new_id() -> str:
    """Generate an opaque entity identifier."""
    return str(uuid.uuid4())
