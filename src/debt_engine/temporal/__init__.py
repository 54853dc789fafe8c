"""Git history extraction: churn, co-change and ownership."""

from .blame import blame_file, blame_files, parse_line_porcelain
from .git_extractor import GitExtractor
from .history import build_history, count_changes
from .models import Commit, HistorySnapshot

__all__ = [
    "Commit",
    "GitExtractor",
    "HistorySnapshot",
    "blame_file",
    "blame_files",
    "build_history",
    "count_changes",
    "parse_line_porcelain",
]
