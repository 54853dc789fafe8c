"""User acknowledgement of intentionally accepted high-debt files.

Supervision never changes a score. It only tags a FileScore so that
presentation layers can leave accepted files out of remediation lists,
and flags files that got noticeably worse since they were accepted.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Mapping, Optional

from .models import FileScore, SupervisionStatus

# Points a file may drift above its accepted score before it counts as regressed.
REGRESSION_TOLERANCE = 5.0


@dataclass(frozen=True)
class SupervisionRecord:
    relative_path: str
    accepted_score: float
    note: str
    accepted_at: datetime


def supervision_status(score: float, record: Optional[SupervisionRecord]) -> SupervisionStatus:
    if record is None:
        return SupervisionStatus.NONE
    if score > record.accepted_score + REGRESSION_TOLERANCE:
        return SupervisionStatus.REGRESSED
    return SupervisionStatus.ACCEPTABLE


def apply_supervision(
    file_score: FileScore, records: Mapping[str, SupervisionRecord]
) -> FileScore:
    status = supervision_status(file_score.composite_score, records.get(file_score.relative_path))
    if status == file_score.supervision_status:
        return file_score
    return file_score.with_supervision(status)
