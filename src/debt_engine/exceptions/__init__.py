"""Exception hierarchy for the debt engine."""

from .analysis import (
    AnalysisCancelledError,
    AnalysisError,
    AnalysisInProgressError,
    FileAccessError,
    NoAnalysisError,
    ParsingError,
    UnsupportedLanguageError,
)
from .base import DebtEngineError
from .config import ConfigurationError, InvalidConfigError, InvalidPathError
from .history import (
    EmptyHistoryError,
    GitCommandError,
    HistoryError,
    NotAGitRepositoryError,
)

__all__ = [
    "DebtEngineError",
    "AnalysisError",
    "AnalysisCancelledError",
    "AnalysisInProgressError",
    "FileAccessError",
    "NoAnalysisError",
    "ParsingError",
    "UnsupportedLanguageError",
    "ConfigurationError",
    "InvalidConfigError",
    "InvalidPathError",
    "HistoryError",
    "NotAGitRepositoryError",
    "EmptyHistoryError",
    "GitCommandError",
]
