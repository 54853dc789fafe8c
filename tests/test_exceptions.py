"""Tests for the exception hierarchy."""

from pathlib import Path

import pytest

from debt_engine.exceptions import (
    AnalysisError,
    ConfigurationError,
    DebtEngineError,
    FileAccessError,
    GitCommandError,
    HistoryError,
    InvalidConfigError,
    NoAnalysisError,
    NotAGitRepositoryError,
)


class TestDebtEngineError:
    def test_message_only(self):
        assert str(DebtEngineError("boom")) == "boom"

    def test_details_are_appended(self):
        err = DebtEngineError("boom", {"path": "a.py", "reason": "gone"})
        assert str(err) == "boom (path=a.py, reason=gone)"


class TestHierarchy:
    @pytest.mark.parametrize(
        "error,base",
        [
            (FileAccessError(Path("a.py"), "gone"), AnalysisError),
            (NoAnalysisError("a.py"), AnalysisError),
            (InvalidConfigError("history_days", 3, "too small"), ConfigurationError),
            (NotAGitRepositoryError(Path("/tmp")), HistoryError),
            (GitCommandError("log", "exit 128"), HistoryError),
        ],
    )
    def test_all_derive_from_base(self, error, base):
        assert isinstance(error, base)
        assert isinstance(error, DebtEngineError)

    def test_file_access_keeps_reason(self):
        err = FileAccessError(Path("a.py"), "file not found")
        assert err.reason == "file not found"
        assert err.details["filepath"] == "a.py"
