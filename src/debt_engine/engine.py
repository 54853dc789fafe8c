"""The debt engine command surface for one workspace.

Concurrency model:

* ``_gate`` admits one writer at a time. A full run takes it without
  blocking and is rejected when it is held; an incremental rescore waits
  for it, so a rescore never races a full run.
  Weight and supervision edits also wait for it, so they are applied to
  the result a run publishes instead of being overwritten by it.
* ``_state_lock`` guards the published ``AnalysisResult`` and the
  ``WorkspaceContext`` it was computed from. Both are immutable values
  that are replaced as a whole, so readers always see a consistent pair.
* Cancellation sets an event checked between files; outstanding worker
  tasks are dropped and nothing is published afterwards. A closed engine
  behaves as permanently cancelled.

Published FileScores are written to the workspace store, and a new
engine starts from them. Its ``WorkspaceContext`` is rebuilt on demand.
"""

from __future__ import annotations

import json
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Mapping, Optional

from .clusters import CouplingCluster, detect_clusters
from .config import AnalysisConfig, load_config
from .exceptions import (
    AnalysisCancelledError,
    AnalysisInProgressError,
    DebtEngineError,
    FileAccessError,
    InvalidPathError,
    NoAnalysisError,
)
from .forecast import Forecast, forecast
from .logging_config import get_logger
from .pipeline import (
    LocalFacts,
    WorkspaceContext,
    analyze_local,
    analyze_source,
    assemble_signals,
)
from .scanning.complexity import ParserRegistry
from .scanning.files import discover_files, file_mtime, read_source, relative_to_workspace
from .scanning.imports import ImportGraph, extract_imports
from .scanning.languages import is_source_file
from .scoring.composite import reweight, score_file
from .scoring.models import (
    AnalysisProgress,
    AnalysisResult,
    CouplingPair,
    DebtSnapshot,
    FileBreakdown,
    FileScore,
)
from .scoring.result import breakdown, map_files, merge_file_score
from .scoring.supervision import SupervisionRecord, apply_supervision
from .scoring.weights import from_percentages, normalize_weights, with_defaults
from .signals.coupling import coupling_ratio
from .storage import WorkspaceStore, open_store
from .temporal.blame import blame_file, blame_files
from .temporal.git_extractor import GitExtractor
from .temporal.history import build_history
from .temporal.models import HistorySnapshot

logger = get_logger(__name__)

ProgressCallback = Callable[[AnalysisProgress], None]

MAX_COUPLING_PAIRS = 200
SNAPSHOT_TOP_FILES = 10


class DebtEngine:
    """Scores one workspace and keeps its latest AnalysisResult.

    Usage::

        engine = DebtEngine("/path/to/repo")
        result = engine.run_full_analysis(progress=print)
        engine.reanalyze_file("src/app.py")
        engine.close()
    """

    def __init__(
        self,
        workspace: str | Path,
        config: Optional[AnalysisConfig] = None,
        store: Optional[WorkspaceStore] = None,
    ):
        root = Path(workspace).expanduser().resolve()
        if not root.is_dir():
            raise InvalidPathError(root, "not a directory")
        self.workspace = root
        self.config = config if config is not None else load_config(root)
        self.store: WorkspaceStore = store if store is not None else open_store(root)

        stored = self.store.load_weights()
        if stored is not None:
            self.config = self.config.with_weights(stored)

        self._parsers = ParserRegistry()
        self._gate = threading.Lock()
        self._state_lock = threading.RLock()
        self._context: Optional[WorkspaceContext] = None
        self._cancel = threading.Event()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._closed = False
        self._result: Optional[AnalysisResult] = self._load_stored_result()

    def _load_stored_result(self) -> Optional[AnalysisResult]:
        """The last published result, rescored under the current weights."""
        scores = self.store.load_file_scores()
        if not scores:
            return None
        records = self.store.supervision_records()
        weights = self.config.weights
        files = tuple(apply_supervision(reweight(s, weights), records) for s in scores)
        logger.info("Loaded %d stored file scores for %s", len(files), self.workspace)
        return AnalysisResult.from_files(files, self.config.warning_threshold)

    # ── read access ──────────────────────────────────────────────

    @property
    def result(self) -> Optional[AnalysisResult]:
        with self._state_lock:
            return self._result

    @property
    def is_running(self) -> bool:
        return self._gate.locked()

    def _publish(
        self, result: AnalysisResult, context: Optional[WorkspaceContext] = None
    ) -> None:
        with self._state_lock:
            self._check_cancelled()
            self._result = result
            if context is not None:
                self._context = context
        self.store.replace_file_scores(result.files)

    # ── full run ─────────────────────────────────────────────────

    def run_full_analysis(self, progress: Optional[ProgressCallback] = None) -> AnalysisResult:
        """Score every source file of the workspace.

        Raises:
            AnalysisInProgressError: If a full run is already in flight
            AnalysisCancelledError: If the run was cancelled or the engine is closed
            HistoryError: If the workspace has no usable git history
        """
        if not self._gate.acquire(blocking=False):
            raise AnalysisInProgressError(self.workspace)
        try:
            self._cancel.clear()
            self._check_cancelled()
            return self._run_full(progress)
        finally:
            self._gate.release()

    def _run_full(self, progress: Optional[ProgressCallback]) -> AnalysisResult:
        started = time.monotonic()
        config = self.config

        files = discover_files(self.workspace, config.exclude_dirs)
        logger.info("Analyzing %d source files in %s", len(files), self.workspace)

        history = self._extract_history(files)
        self._check_cancelled()

        facts = self._analyze_files(files, progress)
        self._check_cancelled()

        graph = ImportGraph.build(
            {f.relative_path: f.imports for f in facts},
            {f.relative_path: f.language for f in facts},
        )
        context = WorkspaceContext.build(
            self.workspace, history, graph, config.churn_normalization_percentile
        )
        records = self.store.supervision_records()
        scores = tuple(self._score(f, context, records) for f in facts)

        duration_ms = int((time.monotonic() - started) * 1000)
        result = AnalysisResult.from_files(scores, config.warning_threshold, duration_ms)

        self._publish(result, context)
        logger.info(
            "Workspace score %.1f over %d files (%d high debt) in %d ms",
            result.workspace_score,
            result.file_count,
            result.high_debt_count,
            duration_ms,
        )
        return result

    def _extract_history(self, files: list[str]) -> HistorySnapshot:
        config = self.config
        extractor = GitExtractor(
            str(self.workspace),
            history_days=config.history_days,
            timeout_seconds=config.git_timeout_seconds,
            path_filter=is_source_file,
        )
        head = extractor.ensure_repository()
        commits = extractor.extract()
        owners = blame_files(
            str(self.workspace),
            files,
            workers=config.worker_count,
            timeout_seconds=config.git_timeout_seconds,
            cancel=self._cancel,
        )
        return build_history(
            commits,
            head_sha=head,
            window_days=config.history_days,
            max_files_per_commit=config.max_files_per_commit,
            blame=owners,
        )

    def _analyze_files(
        self, files: list[str], progress: Optional[ProgressCallback]
    ) -> list[LocalFacts]:
        """Run the file-local analyzers on the worker pool.

        Progress is counted on this thread as futures complete, so the
        counter only ever increases and ends at ``total``.
        """
        total = len(files)
        facts: list[LocalFacts] = []
        if progress is not None:
            progress(AnalysisProgress(0, total, ""))
        if not files:
            return facts

        executor = ThreadPoolExecutor(max_workers=self.config.worker_count)
        self._executor = executor
        try:
            futures: dict[Future, str] = {
                executor.submit(analyze_local, self.workspace, rel, self._parsers, self.config): rel
                for rel in files
            }
            done = 0
            for future in as_completed(futures):
                self._check_cancelled()
                facts.append(future.result())
                done += 1
                if progress is not None:
                    progress(AnalysisProgress(done, total, futures[future]))
        finally:
            self._executor = None
            executor.shutdown(wait=not self._cancel.is_set(), cancel_futures=True)

        facts.sort(key=lambda f: f.relative_path)
        return facts

    def _score(
        self,
        facts: LocalFacts,
        context: WorkspaceContext,
        records: Mapping[str, SupervisionRecord],
        owners: Optional[Mapping[str, int]] = None,
    ) -> FileScore:
        signals = assemble_signals(facts, context, self.config, owners)
        score = score_file(
            path=facts.path,
            relative_path=facts.relative_path,
            signals=signals,
            weights=self.config.weights,
            loc=facts.loc,
            language=facts.language,
            last_modified=facts.last_modified,
        )
        return apply_supervision(score, records)

    def _check_cancelled(self) -> None:
        if self._cancel.is_set() or self._closed:
            raise AnalysisCancelledError(self.workspace)

    # ── incremental rescore ──────────────────────────────────────

    def reanalyze_file(self, file_path: str) -> Optional[FileScore]:
        """Rescore one file and merge it into the current result.

        Returns None, leaving the current result untouched, when there is
        no result yet or the file cannot be scored (deleted, unreadable,
        not a source file). A file whose modification time matches its
        current score is not analyzed again; that score is returned.
        """
        with self._gate:
            with self._state_lock:
                context = self._context
                current = self._result
            if current is None or self._closed:
                logger.info("No analysis to update yet, skipping %s", file_path)
                return None

            try:
                rel = relative_to_workspace(self.workspace, file_path)
                known = current.find(rel)
                if known is not None and known.last_modified == file_mtime(self.workspace, rel):
                    logger.debug("%s unchanged since it was scored", rel)
                    return known
                source = read_source(self.workspace, rel, self.config.max_file_size_bytes)
            except FileAccessError as e:
                logger.info("Not rescoring %s: %s", file_path, e.reason)
                return None

            try:
                if context is None:
                    context = self._build_context()
                context = self._refresh_history(context)
                facts = analyze_source(source, self._parsers, self.config)
                context = context.with_file_imports(facts).with_fresh_coverage()
                owners = context.history.owners_of(facts.relative_path) or blame_file(
                    str(self.workspace), rel, self.config.git_timeout_seconds
                )
                score = self._score(facts, context, self.store.supervision_records(), owners)
            except DebtEngineError as e:
                logger.warning("Rescoring %s failed: %s", rel, e)
                return None

            with self._state_lock:
                if self._closed:
                    return None
                self._result = merge_file_score(self._result or current, score)
                self._context = context
            self.store.upsert_file_score(score)
            logger.debug("Rescored %s: %.1f", rel, score.composite_score)
            return score

    def _refresh_history(self, context: WorkspaceContext) -> WorkspaceContext:
        """Re-extract history if HEAD moved since it was taken."""
        extractor = GitExtractor(
            str(self.workspace),
            history_days=self.config.history_days,
            timeout_seconds=self.config.git_timeout_seconds,
            path_filter=is_source_file,
        )
        head = extractor.head_sha()
        if head is None or head == context.history.head_sha:
            return context

        logger.info("HEAD moved to %s, refreshing history", head[:10])
        commits = extractor.extract()
        history = build_history(
            commits,
            head_sha=head,
            window_days=self.config.history_days,
            max_files_per_commit=self.config.max_files_per_commit,
            blame=context.history.blame,
        )
        return context.with_history(history, self.config.churn_normalization_percentile)

    # ── projections ──────────────────────────────────────────────

    def get_file_breakdown(self, path: str) -> FileBreakdown:
        """Components of a scored file ordered by contribution.

        Raises:
            NoAnalysisError: If the file has not been scored
        """
        return breakdown(self.get_file_score(path))

    def get_change_couplings(self, threshold: float = 0.0) -> list[CouplingPair]:
        """Co-changing pairs with ``coupling_ratio >= threshold``.

        Pairs need at least ``min_co_changes`` shared commits. When a result
        exists, only pairs between currently scored files are listed. The
        list is ordered by co-change count and capped at 200 pairs.
        """
        context = self._ensure_context()
        history = context.history
        result = self.result
        scored = {f.relative_path for f in result.files} if result is not None else None

        pairs = []
        for a, b, count in history.iter_pairs():
            if count < self.config.min_co_changes:
                continue
            if scored is not None and not (a in scored and b in scored):
                continue
            ratio = coupling_ratio(count, history.churn_of(a), history.churn_of(b))
            if ratio < threshold:
                continue
            pairs.append(
                CouplingPair(
                    file_a=a,
                    file_b=b,
                    coupling_ratio=ratio,
                    co_change_count=count,
                    has_import_link=context.import_graph.has_link(a, b),
                )
            )
        pairs.sort(key=lambda p: (-p.co_change_count, -p.coupling_ratio, p.file_a, p.file_b))
        return pairs[:MAX_COUPLING_PAIRS]

    def get_coupling_clusters(self, threshold: float = 0.0) -> list[CouplingCluster]:
        return detect_clusters(self.get_change_couplings(threshold))

    def _ensure_context(self) -> WorkspaceContext:
        """Context of the last full run, or a history and import scan without scoring."""
        with self._state_lock:
            if self._context is not None:
                return self._context

        with self._gate:
            with self._state_lock:
                if self._context is not None:
                    return self._context
            context = self._build_context()
            with self._state_lock:
                self._context = context
            return context

    def _build_context(self) -> WorkspaceContext:
        """History and import graph of the workspace. Callers hold ``_gate``."""
        files = discover_files(self.workspace, self.config.exclude_dirs)
        history = self._extract_history(files)
        imports: dict[str, list[str]] = {}
        languages: dict[str, str] = {}
        for rel in files:
            try:
                source = read_source(self.workspace, rel, self.config.max_file_size_bytes)
            except FileAccessError:
                continue
            text = None if source.too_large else source.text()
            imports[rel] = extract_imports(text, source.language) if text else []
            languages[rel] = source.language
        return WorkspaceContext.build(
            self.workspace,
            history,
            ImportGraph.build(imports, languages),
            self.config.churn_normalization_percentile,
        )

    # ── weights ──────────────────────────────────────────────────

    def set_weights(self, weights: Mapping[str, float]) -> dict[str, float]:
        """Replace the weight vector.

        Values above 1 mark the vector as percentages. Components left out
        keep their default weight, then the vector is renormalized.
        """
        weights = with_defaults(from_percentages(weights))
        return self._apply_config(self.config.with_weights(normalize_weights(weights)))

    def set_weight(self, key: str, value: float) -> dict[str, float]:
        return self._apply_config(self.config.with_weight(key, value))

    def reset_weights(self) -> dict[str, float]:
        weights = self._apply_config(self.config.with_default_weights(), persist=False)
        self.store.clear_weights()
        return weights

    def _apply_config(self, config: AnalysisConfig, persist: bool = True) -> dict[str, float]:
        with self._gate:
            records = self.store.supervision_records()
            with self._state_lock:
                self.config = config
                if self._result is not None:
                    self._result = map_files(
                        self._result,
                        lambda f: apply_supervision(reweight(f, config.weights), records),
                    )
            if persist:
                self.store.save_weights(config.weights)
        return dict(config.weights)

    # ── supervision ──────────────────────────────────────────────

    def supervise_file(self, path: str, note: str = "") -> FileScore:
        """Accept a file's current debt. Returns the re-tagged FileScore."""
        score = self.get_file_score(path)
        self.store.set_supervision(
            SupervisionRecord(
                relative_path=score.relative_path,
                accepted_score=score.composite_score,
                note=note,
                accepted_at=datetime.now(timezone.utc),
            )
        )
        return self._retag(score.relative_path)

    def unsupervise_file(self, path: str) -> FileScore:
        score = self.get_file_score(path)
        self.store.remove_supervision(score.relative_path)
        return self._retag(score.relative_path)

    def get_file_score(self, path: str) -> FileScore:
        result = self.result
        score = result.find(path) if result is not None else None
        if score is None and result is not None:
            try:
                score = result.find(relative_to_workspace(self.workspace, path))
            except FileAccessError:
                score = None
        if score is None:
            raise NoAnalysisError(path)
        return score

    def _retag(self, relative_path: str) -> FileScore:
        with self._gate:
            records = self.store.supervision_records()
            with self._state_lock:
                if self._result is not None:
                    self._result = map_files(
                        self._result, lambda f: apply_supervision(f, records)
                    )
                score = self._result.find(relative_path) if self._result is not None else None
        if score is None:
            raise NoAnalysisError(relative_path)
        return score

    # ── snapshots ────────────────────────────────────────────────

    def ingest_snapshot(
        self,
        workspace_score: float,
        file_count: int,
        high_debt_count: int,
        commit_count_week: int,
        metadata: Optional[str] = None,
    ) -> DebtSnapshot:
        return self.store.append_snapshot(
            workspace_score, file_count, high_debt_count, commit_count_week, metadata
        )

    def take_snapshot(self) -> DebtSnapshot:
        """Record the current result in the snapshot history."""
        with self._state_lock:
            result = self._result
            context = self._context
        if result is None:
            raise NoAnalysisError(str(self.workspace))
        if context is None:
            context = self._ensure_context()
        top = [
            [f.relative_path, round(f.composite_score, 2)]
            for f in result.ranked()[:SNAPSHOT_TOP_FILES]
        ]
        return self.ingest_snapshot(
            result.workspace_score,
            result.file_count,
            result.high_debt_count,
            context.history.commit_count_week,
            json.dumps(top),
        )

    def get_snapshots(self, limit: Optional[int] = None) -> list[DebtSnapshot]:
        return self.store.list_snapshots(limit)

    def forecast(self) -> Forecast:
        return forecast(
            self.store.list_snapshots(),
            warning_threshold=self.config.warning_threshold,
            critical_threshold=self.config.critical_threshold,
        )

    # ── lifecycle ────────────────────────────────────────────────

    def cancel(self) -> None:
        """Stop an in-flight run. Pending file tasks are dropped, not awaited."""
        self._cancel.set()
        executor = self._executor
        if executor is not None:
            executor.shutdown(wait=False, cancel_futures=True)
        logger.info("Cancellation requested for %s", self.workspace)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.cancel()
        self.store.close()

    def __enter__(self) -> "DebtEngine":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class WorkspaceManager:
    """Keeps the engine of the active workspace.

    Switching workspaces closes the previous engine, which cancels any
    analysis still running there.
    """

    def __init__(self, config_overrides: Optional[dict] = None):
        self._lock = threading.Lock()
        self._engine: Optional[DebtEngine] = None
        self._overrides = dict(config_overrides or {})

    def open(self, workspace: str | Path) -> DebtEngine:
        root = Path(workspace).expanduser().resolve()
        with self._lock:
            if self._engine is not None and self._engine.workspace == root:
                return self._engine
            previous = self._engine
            self._engine = DebtEngine(root, load_config(root, **self._overrides))
        if previous is not None:
            previous.close()
        return self._engine

    def close(self) -> None:
        with self._lock:
            engine, self._engine = self._engine, None
        if engine is not None:
            engine.close()

    def run_full_analysis(
        self, workspace_path: str | Path, progress: Optional[ProgressCallback] = None
    ) -> AnalysisResult:
        return self.open(workspace_path).run_full_analysis(progress)

    def reanalyze_file(self, workspace_path: str | Path, file_path: str) -> Optional[FileScore]:
        return self.open(workspace_path).reanalyze_file(file_path)

    def get_change_couplings(
        self, workspace_path: str | Path, threshold: float = 0.0
    ) -> list[CouplingPair]:
        return self.open(workspace_path).get_change_couplings(threshold)

    def get_file_breakdown(self, path: str) -> FileBreakdown:
        with self._lock:
            engine = self._engine
        if engine is None:
            raise NoAnalysisError(path)
        return engine.get_file_breakdown(path)
