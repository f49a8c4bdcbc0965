"""Attachment (robot run strategy) schema."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from .validation import ValidationResult, parse_record, validate_record


class Attachment(BaseModel):
    """
    A curated robot attachment and how it performs on a run.

    Times are in seconds; ``precision`` is a percentage.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = Field(min_length=1)
    run_exit: str = Field(min_length=1, alias="runExit")
    missions: str = Field(min_length=1)
    points: float = Field(ge=0)
    avg_time: float = Field(ge=0, alias="avgTime")
    swap_time: float = Field(ge=0, alias="swapTime")
    precision: float = Field(ge=0, le=100)
    image_url: Optional[str] = Field(default=None, alias="imageUrl")


def validate_attachment(raw: Any) -> ValidationResult[Attachment]:
    return validate_record(Attachment, raw)


def parse_attachment(raw: Any) -> Attachment:
    return parse_record(Attachment, raw, "attachment")
