"""Test coverage gap from an lcov report or co-located test files."""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import Optional

from ..logging_config import get_logger
from .base import SignalResult

logger = get_logger(__name__)

LCOV_REPORT = Path("coverage") / "lcov.info"

TESTED_SCORE = 30.0
UNTESTED_SCORE = 80.0


def is_test_file(relative_path: str) -> bool:
    path = PurePosixPath(relative_path)
    stem = path.stem
    return (
        stem.startswith("test_")
        or stem.endswith(("_test", ".test", ".spec"))
        or stem.endswith("Test")
        or "__tests__" in path.parts
    )


def candidate_test_paths(relative_path: str) -> list[PurePosixPath]:
    """Conventional locations of the tests for a source file."""
    path = PurePosixPath(relative_path)
    stem, ext, parent = path.stem, path.suffix, path.parent
    return [
        parent / f"{stem}.test{ext}",
        parent / f"{stem}.spec{ext}",
        parent / f"test_{stem}{ext}",
        parent / f"{stem}_test{ext}",
        PurePosixPath("tests") / f"test_{stem}{ext}",
        PurePosixPath("test") / f"{stem}_test{ext}",
        parent / "__tests__" / f"{stem}.test{ext}",
    ]


class CoverageIndex:
    """Per-workspace coverage lookup. The lcov report is read once."""

    def __init__(self, workspace: Path):
        self.workspace = Path(workspace)
        self._lcov: Optional[str] = None
        report = self.workspace / LCOV_REPORT
        if report.is_file():
            try:
                self._lcov = report.read_text(encoding="utf-8", errors="replace")
            except OSError as e:
                logger.warning("Cannot read %s: %s", report, e)

    def score(self, relative_path: str) -> SignalResult:
        if is_test_file(relative_path):
            return SignalResult(0.0, ("test file",))

        if self._lcov is not None:
            if relative_path in self._lcov:
                return SignalResult(TESTED_SCORE, ("listed in coverage/lcov.info",))
            return SignalResult(UNTESTED_SCORE, ("missing from coverage/lcov.info",))

        for candidate in candidate_test_paths(relative_path):
            if (self.workspace / candidate).is_file():
                return SignalResult(TESTED_SCORE, (f"tests found at {candidate}",))
        return SignalResult(UNTESTED_SCORE, ("no co-located test file",))
