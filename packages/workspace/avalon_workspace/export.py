"""CSV export of evaluation scores."""

from __future__ import annotations

import csv
import io
from typing import Iterable

from avalon_shared.schemas import CRITERIA, Evaluation


def _fmt(value: float | None) -> str:
    if value is None:
        return ""
    return str(int(value)) if float(value).is_integer() else str(value)


def evaluations_to_csv(evaluations: Iterable[Evaluation]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(["Item", *(c.label for c in CRITERIA), "Total Score", "Pinned"])
    for ev in evaluations:
        writer.writerow(
            [
                ev.name,
                *(_fmt(ev.scores.get(c.key)) for c in CRITERIA),
                _fmt(ev.total_score),
                "Yes" if ev.is_pinned else "No",
            ]
        )
    return buf.getvalue()
