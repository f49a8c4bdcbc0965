"""Innovation-project evaluation schema and its scoring criteria."""

from __future__ import annotations

from typing import Annotated, Any, Dict

from pydantic import BaseModel, ConfigDict, Field

from .validation import ValidationResult, parse_record, validate_record

MIN_SCORE = 0
MAX_SCORE = 10


class Criterion(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    label: str


CRITERIA: tuple[Criterion, ...] = (
    Criterion(key="tema", label="Theme"),
    Criterion(key="coherence", label="Theme-Problem-Solution Coherence"),
    Criterion(key="alignment", label="Alignment with Season Theme"),
    Criterion(key="feasibility", label="Feasibility"),
    Criterion(key="originality", label="Originality"),
    Criterion(key="clarity", label="Clarity/Records"),
)

CRITERIA_KEYS: tuple[str, ...] = tuple(c.key for c in CRITERIA)

Score = Annotated[float, Field(ge=MIN_SCORE, le=MAX_SCORE)]


class Evaluation(BaseModel):
    """A judged item. Scores may cover only some criteria."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = Field(min_length=1)
    scores: Dict[str, Score] = Field(default_factory=dict)
    is_pinned: bool = Field(default=False, alias="isPinned")

    @property
    def total_score(self) -> float:
        return sum(self.scores[k] for k in CRITERIA_KEYS if k in self.scores)

    @property
    def max_score(self) -> int:
        return len(CRITERIA) * MAX_SCORE


def validate_evaluation(raw: Any) -> ValidationResult[Evaluation]:
    return validate_record(Evaluation, raw)


def parse_evaluation(raw: Any) -> Evaluation:
    return parse_record(Evaluation, raw, "evaluation")
