"""Build the shared HistorySnapshot from parsed commits and blame data."""

from __future__ import annotations

import time
from collections import Counter, defaultdict
from itertools import combinations
from typing import Mapping, Optional, Sequence

from ..logging_config import get_logger
from .models import Commit, HistorySnapshot

logger = get_logger(__name__)


def count_changes(
    commits: Sequence[Commit], max_files_per_commit: int
) -> tuple[dict[str, int], dict[tuple[str, str], int]]:
    """Per-file churn and per-pair co-change counts.

    Oversized commits (bulk renames, formatting sweeps) still count toward
    churn but contribute no co-change pairs, which bounds the quadratic
    pair expansion.
    """
    churn: Counter[str] = Counter()
    co_change: Counter[tuple[str, str]] = Counter()
    skipped = 0

    for commit in commits:
        files = sorted(set(commit.files))
        churn.update(files)
        if len(files) > max_files_per_commit:
            skipped += 1
            continue
        co_change.update(combinations(files, 2))

    if skipped:
        logger.info(
            "Skipped co-change pairing for %d commits touching more than %d files",
            skipped,
            max_files_per_commit,
        )
    return dict(churn), dict(co_change)


def index_partners(co_change: Mapping[tuple[str, str], int]) -> dict[str, dict[str, int]]:
    partners: dict[str, dict[str, int]] = defaultdict(dict)
    for (a, b), count in co_change.items():
        partners[a][b] = count
        partners[b][a] = count
    return dict(partners)


def build_history(
    commits: Sequence[Commit],
    head_sha: str,
    window_days: int,
    max_files_per_commit: int,
    blame: Optional[Mapping[str, Mapping[str, int]]] = None,
    extracted_at: Optional[int] = None,
) -> HistorySnapshot:
    churn, co_change = count_changes(commits, max_files_per_commit)
    return HistorySnapshot(
        head_sha=head_sha,
        window_days=window_days,
        extracted_at=int(time.time()) if extracted_at is None else extracted_at,
        commits=tuple(commits),
        churn=churn,
        co_change=co_change,
        blame={path: dict(owners) for path, owners in (blame or {}).items()},
        partners=index_partners(co_change),
    )
