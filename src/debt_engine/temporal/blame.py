"""Line ownership per author from ``git blame`` against HEAD."""

from __future__ import annotations

import subprocess
from collections import Counter
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from threading import Event
from typing import Iterable, Optional

from ..logging_config import get_logger

logger = get_logger(__name__)


def parse_line_porcelain(output: str) -> dict[str, int]:
    """Count owned lines per author in ``--line-porcelain`` output."""
    owners: Counter[str] = Counter()
    for line in output.splitlines():
        if line.startswith("author ") and not line.startswith("author-"):
            owners[line[len("author "):]] += 1
    return dict(owners)


def blame_file(workspace: str, relative_path: str, timeout_seconds: int = 60) -> dict[str, int]:
    """Author -> owned line count of one file at HEAD.

    Untracked files and git failures give an empty mapping; a single file's
    ownership is never worth aborting a run.
    """
    cmd = [
        "git",
        "-c",
        "core.quotePath=false",
        "-C",
        workspace,
        "blame",
        "--line-porcelain",
        "HEAD",
        "--",
        relative_path,
    ]
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout_seconds,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired) as e:
        logger.debug("git blame failed for %s: %s", relative_path, e)
        return {}
    if result.returncode != 0:
        logger.debug("git blame skipped %s: %s", relative_path, result.stderr.strip())
        return {}
    return parse_line_porcelain(result.stdout)


def blame_files(
    workspace: str,
    relative_paths: Iterable[str],
    workers: int = 4,
    timeout_seconds: int = 60,
    cancel: Optional[Event] = None,
) -> dict[str, dict[str, int]]:
    """Blame many files in parallel. Files with no owners are left out."""
    workspace = str(Path(workspace).resolve())
    paths = list(relative_paths)
    results: dict[str, dict[str, int]] = {}
    if not paths:
        return results

    executor = ThreadPoolExecutor(max_workers=max(1, workers))
    try:
        futures = {
            executor.submit(blame_file, workspace, path, timeout_seconds): path for path in paths
        }
        for future in as_completed(futures):
            if cancel is not None and cancel.is_set():
                break
            owners = future.result()
            if owners:
                results[futures[future]] = owners
    finally:
        executor.shutdown(wait=cancel is None or not cancel.is_set(), cancel_futures=True)
    return results
