"""Immutable result types produced by the scoring pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional

from .weights import COMPONENT_KEYS


class SupervisionStatus(str, Enum):
    NONE = "none"
    ACCEPTABLE = "acceptable"
    REGRESSED = "regressed"


@dataclass(frozen=True)
class ComponentScore:
    """One weighted signal inside a FileScore."""

    raw_score: float
    weight: float
    details: tuple[str, ...] = ()

    @property
    def contribution(self) -> float:
        return self.raw_score * self.weight

    def to_dict(self) -> dict[str, Any]:
        return {
            "raw_score": round(self.raw_score, 2),
            "weight": round(self.weight, 4),
            "contribution": round(self.contribution, 2),
            "details": list(self.details),
        }


@dataclass(frozen=True)
class FileScore:
    """Debt score of a single file.

    ``composite_score`` always equals the sum of the component
    contributions; build instances through :meth:`build` so the two can
    never disagree.
    """

    path: str
    relative_path: str
    composite_score: float
    components: Mapping[str, ComponentScore]
    loc: int
    language: str
    last_modified: datetime
    supervision_status: SupervisionStatus = SupervisionStatus.NONE

    @classmethod
    def build(
        cls,
        path: str,
        relative_path: str,
        components: Mapping[str, ComponentScore],
        loc: int,
        language: str,
        last_modified: datetime,
        supervision_status: SupervisionStatus = SupervisionStatus.NONE,
    ) -> "FileScore":
        missing = [k for k in COMPONENT_KEYS if k not in components]
        if missing:
            raise ValueError(f"FileScore is missing components: {', '.join(missing)}")
        ordered = {key: components[key] for key in COMPONENT_KEYS}
        composite = sum(c.contribution for c in ordered.values())
        return cls(
            path=path,
            relative_path=relative_path,
            composite_score=composite,
            components=MappingProxyType(ordered),
            loc=loc,
            language=language,
            last_modified=last_modified,
            supervision_status=supervision_status,
        )

    def with_supervision(self, status: SupervisionStatus) -> "FileScore":
        return replace(self, supervision_status=status)

    def raw_scores(self) -> dict[str, float]:
        return {key: c.raw_score for key, c in self.components.items()}

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "relative_path": self.relative_path,
            "composite_score": round(self.composite_score, 2),
            "loc": self.loc,
            "language": self.language,
            "last_modified": self.last_modified.isoformat(),
            "supervision_status": self.supervision_status.value,
            "components": {k: c.to_dict() for k, c in self.components.items()},
        }


@dataclass(frozen=True)
class AnalysisResult:
    """Workspace-wide result.

    The aggregate fields are always derived from ``files`` by
    :meth:`from_files`; they are never adjusted in place.
    """

    workspace_score: float
    file_count: int
    high_debt_count: int
    files: tuple[FileScore, ...]
    duration_ms: int
    warning_threshold: float

    @classmethod
    def from_files(
        cls, files: tuple[FileScore, ...], warning_threshold: float, duration_ms: int = 0
    ) -> "AnalysisResult":
        files = tuple(files)
        count = len(files)
        workspace_score = sum(f.composite_score for f in files) / count if count else 0.0
        high_debt = sum(1 for f in files if f.composite_score > warning_threshold)
        return cls(
            workspace_score=workspace_score,
            file_count=count,
            high_debt_count=high_debt,
            files=files,
            duration_ms=duration_ms,
            warning_threshold=warning_threshold,
        )

    def find(self, path: str) -> Optional[FileScore]:
        """Look a file up by absolute or workspace-relative path."""
        for f in self.files:
            if f.path == path or f.relative_path == path:
                return f
        return None

    def ranked(self) -> list[FileScore]:
        return sorted(self.files, key=lambda f: f.composite_score, reverse=True)

    def to_dict(self) -> dict[str, Any]:
        return {
            "workspace_score": round(self.workspace_score, 2),
            "file_count": self.file_count,
            "high_debt_count": self.high_debt_count,
            "duration_ms": self.duration_ms,
            "files": [f.to_dict() for f in self.ranked()],
        }


@dataclass(frozen=True)
class CouplingPair:
    """Unordered pair of files that changed together.

    ``file_a`` sorts before ``file_b`` so equal pairs compare equal.
    """

    file_a: str
    file_b: str
    coupling_ratio: float
    co_change_count: int
    has_import_link: bool

    def __post_init__(self) -> None:
        if self.file_b < self.file_a:
            a, b = self.file_a, self.file_b
            object.__setattr__(self, "file_a", b)
            object.__setattr__(self, "file_b", a)

    def to_dict(self) -> dict[str, Any]:
        return {
            "file_a": self.file_a,
            "file_b": self.file_b,
            "coupling_ratio": round(self.coupling_ratio, 4),
            "co_change_count": self.co_change_count,
            "has_import_link": self.has_import_link,
        }


@dataclass(frozen=True)
class DebtSnapshot:
    id: int
    timestamp: datetime
    composite_score: float
    file_count: int
    high_debt_count: int
    commit_count_week: int
    metadata: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "composite_score": round(self.composite_score, 2),
            "file_count": self.file_count,
            "high_debt_count": self.high_debt_count,
            "commit_count_week": self.commit_count_week,
            "metadata": self.metadata,
        }


@dataclass(frozen=True)
class AnalysisProgress:
    current: int
    total: int
    current_file: str


@dataclass(frozen=True)
class NamedComponent:
    name: str
    score: ComponentScore


@dataclass(frozen=True)
class FileBreakdown:
    """Read-only projection of a FileScore, components by contribution."""

    relative_path: str
    composite_score: float
    components: tuple[NamedComponent, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "relative_path": self.relative_path,
            "composite_score": round(self.composite_score, 2),
            "components": [{"name": c.name, **c.score.to_dict()} for c in self.components],
        }
