"""Decision staleness: how long ago the design record of a file was reviewed."""

from __future__ import annotations

import re
from datetime import date
from pathlib import Path, PurePosixPath
from typing import Optional

from .base import SignalResult

ADR_DIR = Path(".debtengine") / "adrs"

FRESH_DAYS = 30
STALE_DAYS = 180

_REVIEW_RE = re.compile(
    r"^\s*(?:last_reviewed_at|reviewed|last-reviewed)\s*:\s*(\d{4}-\d{2}-\d{2})",
    re.IGNORECASE | re.MULTILINE,
)


def find_adr(workspace: Path, relative_path: str) -> Optional[Path]:
    path = PurePosixPath(relative_path)
    candidates = [
        workspace / ADR_DIR / f"{path.stem}.adr.md",
        workspace / ADR_DIR / f"{path.stem}.md",
        workspace / path.parent / f"{path.stem}.adr.md",
    ]
    return next((c for c in candidates if c.is_file()), None)


def parse_review_date(text: str) -> Optional[date]:
    match = _REVIEW_RE.search(text)
    if match is None:
        return None
    try:
        return date.fromisoformat(match.group(1))
    except ValueError:
        return None


def score_review_age(days: int) -> float:
    if days < FRESH_DAYS:
        return 0.0
    if days > STALE_DAYS:
        return 100.0
    return (days - FRESH_DAYS) / (STALE_DAYS - FRESH_DAYS) * 100.0


def score_staleness(
    workspace: Path, relative_path: str, smell_score: float, today: Optional[date] = None
) -> SignalResult:
    """Score from the file's ADR review date.

    Without an ADR, a smelly file (smell score above 30) gets 50 since its
    design rationale is both undocumented and probably needed.
    """
    adr = find_adr(Path(workspace), relative_path)
    if adr is None:
        if smell_score > 30:
            return SignalResult(50.0, ("no ADR for a file with notable smells",))
        return SignalResult(0.0, ("no ADR",))

    try:
        reviewed = parse_review_date(adr.read_text(encoding="utf-8", errors="replace"))
    except OSError:
        reviewed = None
    if reviewed is None:
        return SignalResult(50.0, (f"{adr.name} has no review date",))

    days = ((today or date.today()) - reviewed).days
    return SignalResult(score_review_age(days), (f"{adr.name} reviewed {days} days ago",))
