"""Deriving new AnalysisResults from old ones."""

from __future__ import annotations

from typing import Callable, Optional

from .models import AnalysisResult, FileBreakdown, FileScore, NamedComponent


def merge_file_score(result: AnalysisResult, score: FileScore) -> AnalysisResult:
    """Replace the entry matching ``score`` by path or relative path, else append.

    The aggregates are recomputed over the merged list.
    """
    files = list(result.files)
    for index, existing in enumerate(files):
        if existing.path == score.path or existing.relative_path == score.relative_path:
            files[index] = score
            break
    else:
        files.append(score)
    return AnalysisResult.from_files(
        tuple(files), result.warning_threshold, duration_ms=result.duration_ms
    )


def map_files(
    result: AnalysisResult,
    transform: Callable[[FileScore], FileScore],
    warning_threshold: Optional[float] = None,
) -> AnalysisResult:
    """Apply ``transform`` to every file and rebuild the aggregates."""
    threshold = result.warning_threshold if warning_threshold is None else warning_threshold
    return AnalysisResult.from_files(
        tuple(transform(f) for f in result.files), threshold, duration_ms=result.duration_ms
    )


def breakdown(score: FileScore) -> FileBreakdown:
    ordered = sorted(
        (NamedComponent(name, component) for name, component in score.components.items()),
        key=lambda c: c.score.contribution,
        reverse=True,
    )
    return FileBreakdown(
        relative_path=score.relative_path,
        composite_score=score.composite_score,
        components=tuple(ordered),
    )
