"""Data models for git history extraction."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterator, Mapping

WEEK_SECONDS = 7 * 86400


@dataclass(frozen=True)
class Commit:
    hash: str
    timestamp: int  # unix seconds
    author: str
    files: tuple[str, ...]  # workspace-relative paths, binary/renamed/deleted removed


@dataclass(frozen=True)
class HistorySnapshot:
    """Everything the history-based analyzers need, extracted once per run.

    Built by :func:`debt_engine.temporal.history.build_history`. All maps
    are read-only views; workers share one instance and nothing mutates
    it after construction.
    """

    head_sha: str
    window_days: int
    extracted_at: int  # unix seconds
    commits: tuple[Commit, ...]  # newest first
    churn: Mapping[str, int]
    co_change: Mapping[tuple[str, str], int]  # keys sorted (a < b)
    blame: Mapping[str, Mapping[str, int]]
    partners: Mapping[str, Mapping[str, int]] = field(repr=False, default_factory=dict)

    def __post_init__(self) -> None:
        for name in ("churn", "co_change"):
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))
        for name in ("blame", "partners"):
            nested = {k: MappingProxyType(dict(v)) for k, v in getattr(self, name).items()}
            object.__setattr__(self, name, MappingProxyType(nested))

    def churn_of(self, path: str) -> int:
        return self.churn.get(path, 0)

    def co_changes_of(self, path: str) -> Mapping[str, int]:
        """Co-change counts of every partner of ``path``."""
        return self.partners.get(path, MappingProxyType({}))

    def owners_of(self, path: str) -> Mapping[str, int]:
        return self.blame.get(path, MappingProxyType({}))

    def iter_pairs(self) -> Iterator[tuple[str, str, int]]:
        for (a, b), count in self.co_change.items():
            yield a, b, count

    @property
    def commit_count_week(self) -> int:
        cutoff = self.extracted_at - WEEK_SECONDS
        return sum(1 for c in self.commits if c.timestamp >= cutoff)

    @property
    def total_commits(self) -> int:
        return len(self.commits)
