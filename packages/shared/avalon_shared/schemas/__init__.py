from .activity import ActivityLog, validate_activity
from .attachments import Attachment, parse_attachment, validate_attachment
from .common import (
    AREAS,
    COLUMNS,
    PRIORITIES,
    AuditAction,
    ColumnId,
    TaskArea,
    TaskPriority,
    column_index,
    new_id,
    next_column,
)
from .evaluations import (
    CRITERIA,
    CRITERIA_KEYS,
    Criterion,
    Evaluation,
    parse_evaluation,
    validate_evaluation,
)
from .tasks import Task, parse_task, validate_task
from .validation import (
    ErrorCode,
    FieldError,
    SchemaValidationError,
    ValidationResult,
    to_record,
)

__all__ = [
    "AREAS",
    "COLUMNS",
    "CRITERIA",
    "CRITERIA_KEYS",
    "PRIORITIES",
    "ActivityLog",
    "Attachment",
    "AuditAction",
    "ColumnId",
    "Criterion",
    "ErrorCode",
    "Evaluation",
    "FieldError",
    "SchemaValidationError",
    "Task",
    "TaskArea",
    "TaskPriority",
    "ValidationResult",
    "column_index",
    "new_id",
    "next_column",
    "parse_attachment",
    "parse_evaluation",
    "parse_task",
    "to_record",
    "validate_activity",
    "validate_attachment",
    "validate_evaluation",
    "validate_task",
]
