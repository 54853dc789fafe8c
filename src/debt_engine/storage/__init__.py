"""Per-workspace persistence: snapshots, supervision, weights and file scores."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Union

from ..logging_config import get_logger
from .database import STORE_DIR, HistoryDB
from .memory import MemoryStore

logger = get_logger(__name__)

WorkspaceStore = Union[HistoryDB, MemoryStore]


def open_store(workspace: Path) -> WorkspaceStore:
    """Open the SQLite store, falling back to memory if it is unavailable."""
    db = HistoryDB(str(workspace))
    try:
        db.connect()
    except (OSError, sqlite3.Error) as e:
        logger.warning("Workspace store unavailable (%s), keeping history in memory", e)
        db.close()
        return MemoryStore()
    return db


__all__ = ["HistoryDB", "MemoryStore", "STORE_DIR", "WorkspaceStore", "open_store"]
