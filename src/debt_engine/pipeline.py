"""Per-file signal computation shared by full runs and incremental rescores.

A run happens in two steps. :func:`analyze_local` does the expensive,
file-local work (parsing, smell scan, import scan) and runs on the worker
pool. :func:`assemble_signals` then combines those facts with the shared,
read-only :class:`WorkspaceContext` (history, import graph, churn threshold)
into the eight component signals.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Mapping, Optional

from .config import AnalysisConfig
from .exceptions import FileAccessError
from .logging_config import get_logger
from .scanning.complexity import ParserRegistry
from .scanning.files import SourceFile, read_source
from .scanning.imports import ImportGraph, extract_imports
from .scanning.languages import detect_language
from .signals import (
    CoverageIndex,
    SignalResult,
    churn_threshold,
    count_smells,
    measure,
    score_change_coupling,
    score_churn,
    score_complexity,
    score_coupling_index,
    score_knowledge,
    score_smells,
    score_staleness,
)
from .temporal.models import HistorySnapshot

logger = get_logger(__name__)


@dataclass(frozen=True)
class LocalFacts:
    """Everything about a file that does not depend on other files."""

    path: str
    relative_path: str
    language: str
    loc: int
    last_modified: datetime
    imports: tuple[str, ...]
    complexity: SignalResult
    smells: SignalResult


@dataclass(frozen=True)
class WorkspaceContext:
    """Shared read-only inputs of one analysis generation."""

    workspace: Path
    history: HistorySnapshot
    import_graph: ImportGraph
    churn_threshold: float
    coverage: CoverageIndex

    @classmethod
    def build(
        cls,
        workspace: Path,
        history: HistorySnapshot,
        import_graph: ImportGraph,
        percentile: float,
    ) -> "WorkspaceContext":
        return cls(
            workspace=workspace,
            history=history,
            import_graph=import_graph,
            churn_threshold=churn_threshold(history.churn, percentile),
            coverage=CoverageIndex(workspace),
        )

    def with_history(self, history: HistorySnapshot, percentile: float) -> "WorkspaceContext":
        return replace(
            self, history=history, churn_threshold=churn_threshold(history.churn, percentile)
        )

    def with_file_imports(self, facts: LocalFacts) -> "WorkspaceContext":
        graph = self.import_graph.with_file(facts.relative_path, facts.language, facts.imports)
        return replace(self, import_graph=graph)

    def with_fresh_coverage(self) -> "WorkspaceContext":
        """Re-read the coverage report, which may have changed since the full run."""
        return replace(self, coverage=CoverageIndex(self.workspace))


def analyze_source(source: SourceFile, parsers: ParserRegistry, config: AnalysisConfig) -> LocalFacts:
    """File-local signals of a loaded source file.

    Binary, oversized and undecodable files keep a FileScore; the
    affected signals score 0 and say why.
    """
    text = source.text()
    if source.is_binary:
        complexity = smells = SignalResult.skipped("binary content")
        imports: tuple[str, ...] = ()
    elif source.too_large:
        note = f"file larger than {config.max_file_size_kb} KB, not parsed"
        complexity = smells = SignalResult.skipped(note)
        imports = ()
    else:
        parser = parsers.for_path(source.relative_path, source.language)
        complexity = score_complexity(measure(parser, source.data, source.relative_path))
        if text is None:
            smells = SignalResult.skipped("not valid UTF-8")
            imports = ()
        else:
            counts = count_smells(
                text, source.language, config.god_function_lines, config.long_param_count
            )
            smells = score_smells(counts, source.loc)
            imports = tuple(extract_imports(text, source.language))

    return LocalFacts(
        path=source.path,
        relative_path=source.relative_path,
        language=source.language,
        loc=source.loc,
        last_modified=source.last_modified,
        imports=imports,
        complexity=complexity,
        smells=smells,
    )


def analyze_local(
    workspace: Path, relative_path: str, parsers: ParserRegistry, config: AnalysisConfig
) -> LocalFacts:
    """Read and analyze one file; an unreadable file gets zeroed local signals."""
    try:
        source = read_source(workspace, relative_path, config.max_file_size_bytes)
    except FileAccessError as e:
        logger.debug("Could not read %s: %s", relative_path, e.reason)
        unreadable = SignalResult.skipped(f"unreadable: {e.reason}")
        return LocalFacts(
            path=str(Path(workspace) / relative_path),
            relative_path=relative_path,
            language=detect_language(relative_path) or "unknown",
            loc=0,
            last_modified=datetime.now(timezone.utc),
            imports=(),
            complexity=unreadable,
            smells=unreadable,
        )
    return analyze_source(source, parsers, config)


def assemble_signals(
    facts: LocalFacts,
    context: WorkspaceContext,
    config: AnalysisConfig,
    owners: Optional[Mapping[str, int]] = None,
) -> dict[str, SignalResult]:
    """All eight component signals of one file."""
    rel = facts.relative_path
    history = context.history
    if owners is None:
        owners = history.owners_of(rel)
    return {
        "churn_rate": score_churn(
            history.churn_of(rel), context.churn_threshold, config.churn_normalization_percentile
        ),
        "code_smell_density": facts.smells,
        "coupling_index": score_coupling_index(context.import_graph, rel),
        "change_coupling": score_change_coupling(history, rel),
        "test_coverage_gap": context.coverage.score(rel),
        "knowledge_concentration": score_knowledge(owners, config.bus_factor_threshold),
        "cyclomatic_complexity": facts.complexity,
        "decision_staleness": score_staleness(context.workspace, rel, facts.smells.raw_score),
    }
