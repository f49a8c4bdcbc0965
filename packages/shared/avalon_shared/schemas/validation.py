"""
Validation results and errors for workspace entities.

Every entity is validated in a single pass; all violated fields are
reported together as ``FieldError`` entries so forms can show every
problem at once.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Generic, Mapping, Optional, TypeVar

from pydantic import BaseModel, Field, ValidationError

M = TypeVar("M", bound=BaseModel)


class ErrorCode(str, Enum):
    REQUIRED = "required"
    OUT_OF_RANGE = "out_of_range"
    INVALID_CHOICE = "invalid_choice"
    INVALID_TYPE = "invalid_type"


# pydantic error type -> our code
_CODE_BY_TYPE: dict[str, ErrorCode] = {
    "missing": ErrorCode.REQUIRED,
    "string_too_short": ErrorCode.REQUIRED,
    "too_short": ErrorCode.REQUIRED,
    "greater_than": ErrorCode.OUT_OF_RANGE,
    "greater_than_equal": ErrorCode.OUT_OF_RANGE,
    "less_than": ErrorCode.OUT_OF_RANGE,
    "less_than_equal": ErrorCode.OUT_OF_RANGE,
    "enum": ErrorCode.INVALID_CHOICE,
    "literal_error": ErrorCode.INVALID_CHOICE,
}

_REASONS: dict[ErrorCode, str] = {
    ErrorCode.REQUIRED: "This field is required.",
    ErrorCode.OUT_OF_RANGE: "Value is out of range.",
    ErrorCode.INVALID_CHOICE: "Value is not one of the allowed options.",
}


class FieldError(BaseModel):
    """A single violated field."""
    field: str
    code: ErrorCode
    reason: str


class SchemaValidationError(ValueError):
    """Raised by ``parse_*`` helpers; carries every field error."""

    def __init__(self, entity: str, errors: list[FieldError]):
        self.entity = entity
        self.errors = errors
        fields = ", ".join(e.field for e in errors)
        super().__init__(f"Invalid {entity}: {fields}")


class ValidationResult(BaseModel, Generic[M]):
    """Outcome of validating an untyped record."""
    entity: Optional[M] = None
    errors: list[FieldError] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.entity is not None and not self.errors

    def fields(self) -> list[str]:
        return [e.field for e in self.errors]


def _field_error(detail: Mapping[str, Any]) -> FieldError:
    field = ".".join(str(part) for part in detail["loc"]) or "__root__"
    code = _CODE_BY_TYPE.get(detail["type"], ErrorCode.INVALID_TYPE)
    reason = _REASONS.get(code)
    if code is ErrorCode.OUT_OF_RANGE or reason is None:
        reason = detail["msg"]
    return FieldError(field=field, code=code, reason=reason)


def collect_errors(exc: ValidationError) -> list[FieldError]:
    """Flatten a pydantic error into one ``FieldError`` per field."""
    seen: dict[str, FieldError] = {}
    for detail in exc.errors():
        err = _field_error(detail)
        seen.setdefault(err.field, err)
    return list(seen.values())


def validate_record(model: type[M], raw: Any) -> ValidationResult[M]:
    """Validate ``raw`` against ``model`` without raising."""
    if not isinstance(raw, Mapping):
        return ValidationResult[model](
            errors=[
                FieldError(
                    field="__root__",
                    code=ErrorCode.INVALID_TYPE,
                    reason="Expected an object.",
                )
            ]
        )
    try:
        entity = model.model_validate(dict(raw))
    except ValidationError as exc:
        return ValidationResult[model](errors=collect_errors(exc))
    return ValidationResult[model](entity=entity)


def parse_record(model: type[M], raw: Any, entity: str) -> M:
    result = validate_record(model, raw)
    if not result.ok:
        raise SchemaValidationError(entity, result.errors)
    return result.entity  # type: ignore[return-value]


def to_record(entity: BaseModel) -> dict[str, Any]:
    """Dump an entity to its persisted (camelCase, JSON-safe) shape."""
    return entity.model_dump(mode="json", by_alias=True)
