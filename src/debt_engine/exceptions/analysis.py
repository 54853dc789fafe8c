"""Analysis-related exceptions: file access, parsing, run lifecycle."""

from pathlib import Path
from typing import List

from .base import DebtEngineError


class AnalysisError(DebtEngineError):
    """Base class for analysis-related errors."""
    pass


class FileAccessError(AnalysisError):
    """Raised when a file cannot be accessed or read."""

    def __init__(self, filepath: Path, reason: str):
        super().__init__(
            f"Cannot access file: {filepath}",
            details={"filepath": str(filepath), "reason": reason},
        )
        self.filepath = filepath
        self.reason = reason


class ParsingError(AnalysisError):
    """Raised when file content cannot be parsed."""

    def __init__(self, filepath: Path, language: str, reason: str):
        super().__init__(
            f"Failed to parse {language} file: {filepath}",
            details={"filepath": str(filepath), "language": language, "reason": reason},
        )
        self.filepath = filepath
        self.language = language
        self.reason = reason


class UnsupportedLanguageError(AnalysisError):
    """Raised when a grammar is requested for a language without one."""

    def __init__(self, language: str, supported_languages: List[str]):
        super().__init__(
            f"Unsupported language: {language}",
            details={"language": language, "supported": ", ".join(supported_languages)},
        )
        self.language = language
        self.supported_languages = supported_languages


class AnalysisInProgressError(AnalysisError):
    """Raised when a full run is requested while another one is running."""

    def __init__(self, workspace: Path):
        super().__init__(
            "A full analysis is already running for this workspace",
            details={"workspace": str(workspace)},
        )
        self.workspace = workspace


class AnalysisCancelledError(AnalysisError):
    """Raised when a run is stopped before it could publish a result."""

    def __init__(self, workspace: Path):
        super().__init__("Analysis was cancelled", details={"workspace": str(workspace)})
        self.workspace = workspace


class NoAnalysisError(AnalysisError):
    """Raised when a projection is requested for a file that was never scored."""

    def __init__(self, path: str):
        super().__init__("No analysis result for file", details={"path": path})
        self.path = path
