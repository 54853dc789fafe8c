"""In-memory workspace store, used when the SQLite store cannot be opened."""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Iterable, Mapping, Optional

from ..scoring.models import DebtSnapshot, FileScore
from ..scoring.supervision import SupervisionRecord


class MemoryStore:
    """Same interface as :class:`~debt_engine.storage.database.HistoryDB`."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._snapshots: list[DebtSnapshot] = []
        self._supervision: dict[str, SupervisionRecord] = {}
        self._weights: Optional[dict[str, float]] = None
        self._file_scores: dict[str, FileScore] = {}

    def connect(self) -> None:
        return None

    def close(self) -> None:
        return None

    def append_snapshot(
        self,
        composite_score: float,
        file_count: int,
        high_debt_count: int,
        commit_count_week: int,
        metadata: Optional[str] = None,
        timestamp: Optional[datetime] = None,
    ) -> DebtSnapshot:
        with self._lock:
            snapshot = DebtSnapshot(
                id=len(self._snapshots) + 1,
                timestamp=timestamp or datetime.now(timezone.utc),
                composite_score=composite_score,
                file_count=file_count,
                high_debt_count=high_debt_count,
                commit_count_week=commit_count_week,
                metadata=metadata,
            )
            self._snapshots.append(snapshot)
            return snapshot

    def list_snapshots(self, limit: Optional[int] = None) -> list[DebtSnapshot]:
        with self._lock:
            ordered = sorted(self._snapshots, key=lambda s: (s.timestamp, s.id))
        return ordered[-limit:] if limit is not None else ordered

    def set_supervision(self, record: SupervisionRecord) -> None:
        with self._lock:
            self._supervision[record.relative_path] = record

    def remove_supervision(self, relative_path: str) -> bool:
        with self._lock:
            return self._supervision.pop(relative_path, None) is not None

    def supervision_records(self) -> dict[str, SupervisionRecord]:
        with self._lock:
            return dict(self._supervision)

    def save_weights(self, weights: Mapping[str, float]) -> None:
        with self._lock:
            self._weights = dict(weights)

    def clear_weights(self) -> None:
        with self._lock:
            self._weights = None

    def load_weights(self) -> Optional[dict[str, float]]:
        with self._lock:
            return dict(self._weights) if self._weights is not None else None

    def replace_file_scores(self, scores: Iterable[FileScore]) -> None:
        with self._lock:
            self._file_scores = {s.relative_path: s for s in scores}

    def upsert_file_score(self, score: FileScore) -> None:
        with self._lock:
            self._file_scores[score.relative_path] = score

    def load_file_scores(self) -> list[FileScore]:
        with self._lock:
            return [self._file_scores[key] for key in sorted(self._file_scores)]
