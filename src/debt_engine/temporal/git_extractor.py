"""Extract git history via subprocess."""

from __future__ import annotations

import re
import subprocess
from pathlib import Path
from typing import Callable, Optional

from ..exceptions import EmptyHistoryError, GitCommandError, NotAGitRepositoryError
from ..logging_config import get_logger
from .models import Commit

logger = get_logger(__name__)

# Raw diff status letters that keep a path in the change set. Deleted (D),
# renamed (R) and copied (C) entries are dropped.
_KEPT_STATUSES = frozenset("AMT")


class GitExtractor:
    """Walk ``git log`` once over a time window and parse the change sets.

    Paths are reported relative to the workspace root (``git log
    --relative``), so a workspace may be any directory inside a repository.
    """

    def __init__(
        self,
        workspace: str,
        history_days: int = 90,
        timeout_seconds: int = 120,
        path_filter: Optional[Callable[[str], bool]] = None,
    ):
        self.workspace = str(Path(workspace).resolve())
        self.history_days = history_days
        self.timeout_seconds = timeout_seconds
        self.path_filter = path_filter

    def ensure_repository(self) -> str:
        """Return the HEAD sha or raise if the workspace has no history."""
        if not self._is_git_repo():
            raise NotAGitRepositoryError(Path(self.workspace))
        sha = self.head_sha()
        if sha is None:
            raise EmptyHistoryError(Path(self.workspace))
        return sha

    def head_sha(self) -> Optional[str]:
        result = self._run(["rev-parse", "--verify", "-q", "HEAD"], check=False)
        sha = result.stdout.strip()
        return sha or None

    def extract(self) -> list[Commit]:
        """Commits inside the window, newest first."""
        raw = self._run_git_log()
        commits = self._parse_log(raw)
        logger.debug(
            "Parsed %d commits from the last %d days", len(commits), self.history_days
        )
        return commits

    def _is_git_repo(self) -> bool:
        try:
            result = subprocess.run(
                ["git", "-C", self.workspace, "rev-parse", "--git-dir"],
                capture_output=True,
                text=True,
                timeout=10,
            )
        except (FileNotFoundError, subprocess.TimeoutExpired):
            return False
        return result.returncode == 0

    def _run(self, args: list[str], check: bool = True) -> subprocess.CompletedProcess:
        cmd = ["git", "-c", "core.quotePath=false", "-C", self.workspace, *args]
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout_seconds,
            )
        except FileNotFoundError:
            raise GitCommandError(args[0], "git executable not found")
        except subprocess.TimeoutExpired:
            raise GitCommandError(args[0], f"timed out after {self.timeout_seconds}s")
        if check and result.returncode != 0:
            raise GitCommandError(args[0], result.stderr.strip() or f"exit {result.returncode}")
        return result

    def _run_git_log(self) -> str:
        return self._run(
            [
                "log",
                f"--since={self.history_days}.days.ago",
                "--no-merges",
                "--relative",
                "-M",
                "--raw",
                "--numstat",
                "--format=%H|%at|%an",
            ]
        ).stdout

    # Matches: 40-char hex hash | unix timestamp | author name
    _HEADER_RE = re.compile(r"^[0-9a-f]{40}\|\d+\|.*$")
    # :100644 100644 <src> <dst> M\tpath   (renames carry two paths)
    _RAW_RE = re.compile(r"^:\d+ \d+ [0-9a-f]+\.* [0-9a-f]+\.* ([A-Z])\d*\t(.+)$")
    # <added>\t<deleted>\tpath, binary files report "-\t-"
    _NUMSTAT_RE = re.compile(r"^(\d+|-)\t(\d+|-)\t(.+)$")

    def _parse_log(self, raw: str) -> list[Commit]:
        """Parse git log output into Commit objects.

        Header lines are detected by regex rather than blank-line separation,
        so commits without file changes are handled correctly.
        """
        commits: list[Commit] = []
        header: Optional[tuple[str, int, str]] = None
        kept: list[str] = []
        binary: set[str] = set()

        def flush() -> None:
            if header is None:
                return
            files = tuple(dict.fromkeys(p for p in kept if p not in binary))
            if files:
                commits.append(Commit(hash=header[0], timestamp=header[1], author=header[2], files=files))

        for line in raw.split("\n"):
            line = line.rstrip("\r")
            if not line.strip():
                continue

            if self._HEADER_RE.match(line):
                flush()
                sha, ts, author = line.split("|", 2)
                header = (sha, int(ts), author)
                kept = []
                binary = set()
                continue

            if header is None:
                continue

            raw_match = self._RAW_RE.match(line)
            if raw_match:
                status, paths = raw_match.groups()
                path = paths.split("\t")[-1]
                if status in _KEPT_STATUSES and self._accepts(path):
                    kept.append(path)
                continue

            numstat = self._NUMSTAT_RE.match(line)
            if numstat and numstat.group(1) == "-" and numstat.group(2) == "-":
                binary.add(numstat.group(3))

        flush()
        return commits

    def _accepts(self, path: str) -> bool:
        return self.path_filter is None or self.path_filter(path)
