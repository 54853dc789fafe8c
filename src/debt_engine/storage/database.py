"""SQLite-backed workspace store kept in .debtengine/ at the workspace root."""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Mapping, Optional

from ..logging_config import get_logger
from ..scoring.models import ComponentScore, DebtSnapshot, FileScore, SupervisionStatus
from ..scoring.supervision import SupervisionRecord
from ..scoring.weights import COMPONENT_KEYS

logger = get_logger(__name__)

# Current schema version (bump when tables change).
_SCHEMA_VERSION = 2

STORE_DIR = ".debtengine"


def _parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _file_score_row(score: FileScore) -> tuple:
    components = {
        key: {"raw_score": c.raw_score, "weight": c.weight, "details": list(c.details)}
        for key, c in score.components.items()
    }
    return (
        score.relative_path,
        score.path,
        score.composite_score,
        score.loc,
        score.language,
        score.last_modified.isoformat(),
        score.supervision_status.value,
        json.dumps(components),
        datetime.now(timezone.utc).isoformat(),
    )


def _file_score_from_row(row: sqlite3.Row) -> FileScore:
    components = {
        key: ComponentScore(value["raw_score"], value["weight"], tuple(value["details"]))
        for key, value in json.loads(row["components"]).items()
    }
    return FileScore.build(
        path=row["path"],
        relative_path=row["relative_path"],
        components=components,
        loc=row["loc"],
        language=row["language"],
        last_modified=_parse_timestamp(row["last_modified"]),
        supervision_status=SupervisionStatus(row["supervision_status"]),
    )


class HistoryDB:
    """Manages the ``.debtengine/history.db`` SQLite database.

    Holds the append-only snapshot history, supervision records, the
    workspace weight vector and the FileScores of the last result.

    Usage::

        with HistoryDB("/path/to/workspace") as db:
            db.append_snapshot(42.0, 120, 7, 15)
    """

    def __init__(self, workspace: str) -> None:
        self.db_dir: Path = Path(workspace) / STORE_DIR
        self.db_path: Path = self.db_dir / "history.db"
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def conn(self) -> sqlite3.Connection:
        """Return the active connection. Raises if not connected."""
        if self._conn is None:
            raise RuntimeError("HistoryDB is not connected. Use as context manager or call connect().")
        return self._conn

    # ── lifecycle ─────────────────────────────────────────────────

    def _ensure_dir(self) -> None:
        """Create .debtengine/ and write a .gitignore for the database files."""
        self.db_dir.mkdir(parents=True, exist_ok=True)
        gitignore = self.db_dir / ".gitignore"
        if not gitignore.exists():
            gitignore.write_text("history.db*\n")

    def connect(self) -> sqlite3.Connection:
        """Open (or create) the database and run migrations."""
        self._ensure_dir()
        # Engine worker threads never touch the store; the engine serializes access.
        conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        conn.execute("PRAGMA journal_mode=WAL")
        conn.row_factory = sqlite3.Row
        self._conn = conn
        self._migrate()
        logger.debug("History DB connected at %s", self.db_path)
        return conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "HistoryDB":
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # ── migration ─────────────────────────────────────────────────

    def _migrate(self) -> None:
        """Idempotently create all tables."""
        c = self.conn

        c.execute("CREATE TABLE IF NOT EXISTS schema_version (version INTEGER NOT NULL)")
        if c.execute("SELECT version FROM schema_version").fetchone() is None:
            c.execute("INSERT INTO schema_version (version) VALUES (?)", (_SCHEMA_VERSION,))
        else:
            c.execute(
                "UPDATE schema_version SET version = ? WHERE version < ?",
                (_SCHEMA_VERSION, _SCHEMA_VERSION),
            )

        c.execute(
            """
            CREATE TABLE IF NOT EXISTS debt_snapshots (
                id                INTEGER PRIMARY KEY AUTOINCREMENT,
                timestamp         TEXT    NOT NULL,
                composite_score   REAL    NOT NULL,
                file_count        INTEGER NOT NULL DEFAULT 0,
                high_debt_count   INTEGER NOT NULL DEFAULT 0,
                commit_count_week INTEGER NOT NULL DEFAULT 0,
                snapshot_metadata TEXT
            )
            """
        )
        c.execute(
            """
            CREATE TABLE IF NOT EXISTS supervision (
                relative_path  TEXT PRIMARY KEY,
                accepted_score REAL NOT NULL,
                note           TEXT NOT NULL DEFAULT '',
                accepted_at    TEXT NOT NULL
            )
            """
        )
        c.execute(
            """
            CREATE TABLE IF NOT EXISTS weights (
                component TEXT PRIMARY KEY,
                value     REAL NOT NULL
            )
            """
        )
        c.execute(
            """
            CREATE TABLE IF NOT EXISTS file_scores (
                relative_path      TEXT PRIMARY KEY,
                path               TEXT NOT NULL,
                composite_score    REAL NOT NULL,
                loc                INTEGER NOT NULL DEFAULT 0,
                language           TEXT NOT NULL,
                last_modified      TEXT NOT NULL,
                supervision_status TEXT NOT NULL DEFAULT 'none',
                components         TEXT NOT NULL,
                updated_at         TEXT NOT NULL
            )
            """
        )
        c.execute(
            "CREATE INDEX IF NOT EXISTS idx_debt_snapshots_timestamp ON debt_snapshots(timestamp)"
        )
        c.commit()

    # ── snapshots ─────────────────────────────────────────────────

    def append_snapshot(
        self,
        composite_score: float,
        file_count: int,
        high_debt_count: int,
        commit_count_week: int,
        metadata: Optional[str] = None,
        timestamp: Optional[datetime] = None,
    ) -> DebtSnapshot:
        ts = timestamp or datetime.now(timezone.utc)
        cur = self.conn.execute(
            """
            INSERT INTO debt_snapshots
                (timestamp, composite_score, file_count, high_debt_count,
                 commit_count_week, snapshot_metadata)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (ts.isoformat(), composite_score, file_count, high_debt_count, commit_count_week, metadata),
        )
        self.conn.commit()
        snapshot_id = cur.lastrowid
        logger.info("Saved debt snapshot %d (score %.1f)", snapshot_id, composite_score)
        return DebtSnapshot(
            id=int(snapshot_id),
            timestamp=ts,
            composite_score=composite_score,
            file_count=file_count,
            high_debt_count=high_debt_count,
            commit_count_week=commit_count_week,
            metadata=metadata,
        )

    def list_snapshots(self, limit: Optional[int] = None) -> list[DebtSnapshot]:
        """Snapshots oldest first; ``limit`` keeps the most recent ones."""
        rows = self.conn.execute(
            "SELECT * FROM debt_snapshots ORDER BY timestamp ASC, id ASC"
        ).fetchall()
        snapshots = [
            DebtSnapshot(
                id=row["id"],
                timestamp=_parse_timestamp(row["timestamp"]),
                composite_score=row["composite_score"],
                file_count=row["file_count"],
                high_debt_count=row["high_debt_count"],
                commit_count_week=row["commit_count_week"],
                metadata=row["snapshot_metadata"],
            )
            for row in rows
        ]
        if limit is not None:
            snapshots = snapshots[-limit:]
        return snapshots

    # ── supervision ───────────────────────────────────────────────

    def set_supervision(self, record: SupervisionRecord) -> None:
        self.conn.execute(
            "INSERT OR REPLACE INTO supervision (relative_path, accepted_score, note, accepted_at) "
            "VALUES (?, ?, ?, ?)",
            (record.relative_path, record.accepted_score, record.note, record.accepted_at.isoformat()),
        )
        self.conn.commit()

    def remove_supervision(self, relative_path: str) -> bool:
        cur = self.conn.execute("DELETE FROM supervision WHERE relative_path = ?", (relative_path,))
        self.conn.commit()
        return cur.rowcount > 0

    def supervision_records(self) -> dict[str, SupervisionRecord]:
        rows = self.conn.execute("SELECT * FROM supervision").fetchall()
        return {
            row["relative_path"]: SupervisionRecord(
                relative_path=row["relative_path"],
                accepted_score=row["accepted_score"],
                note=row["note"],
                accepted_at=_parse_timestamp(row["accepted_at"]),
            )
            for row in rows
        }

    # ── weights ───────────────────────────────────────────────────

    def save_weights(self, weights: Mapping[str, float]) -> None:
        self.conn.executemany(
            "INSERT OR REPLACE INTO weights (component, value) VALUES (?, ?)",
            [(key, float(weights[key])) for key in COMPONENT_KEYS],
        )
        self.conn.commit()

    def clear_weights(self) -> None:
        self.conn.execute("DELETE FROM weights")
        self.conn.commit()

    def load_weights(self) -> Optional[dict[str, float]]:
        rows = self.conn.execute("SELECT component, value FROM weights").fetchall()
        if not rows:
            return None
        return {row["component"]: row["value"] for row in rows}

    # ── file scores ───────────────────────────────────────────────

    _FILE_SCORE_INSERT = (
        "INSERT OR REPLACE INTO file_scores (relative_path, path, composite_score, loc, language, "
        "last_modified, supervision_status, components, updated_at) "
        "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)"
    )

    def replace_file_scores(self, scores: Iterable[FileScore]) -> None:
        """Swap the stored result for ``scores`` in one transaction."""
        rows = [_file_score_row(s) for s in scores]
        with self.conn:
            self.conn.execute("DELETE FROM file_scores")
            self.conn.executemany(self._FILE_SCORE_INSERT, rows)
        logger.debug("Stored %d file scores", len(rows))

    def upsert_file_score(self, score: FileScore) -> None:
        with self.conn:
            self.conn.execute(self._FILE_SCORE_INSERT, _file_score_row(score))

    def load_file_scores(self) -> list[FileScore]:
        rows = self.conn.execute("SELECT * FROM file_scores ORDER BY relative_path").fetchall()
        scores = []
        for row in rows:
            try:
                scores.append(_file_score_from_row(row))
            except (ValueError, KeyError, TypeError) as e:
                logger.warning("Dropping stored score of %s: %s", row["relative_path"], e)
        return scores
