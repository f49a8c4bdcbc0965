"""Authentication audit trail entries."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel

from .common import AuditAction
from .validation import ValidationResult, validate_record


class ActivityLog(BaseModel):
    id: str
    username: str
    action: AuditAction
    timestamp: datetime


def validate_activity(raw: Any) -> ValidationResult[ActivityLog]:
    return validate_record(ActivityLog, raw)
