"""Version-control history exceptions.

Every analyzer depends on the extracted history, so these are fatal to a
full run.
"""

from pathlib import Path

from .base import DebtEngineError


class HistoryError(DebtEngineError):
    """Base class for history extraction errors."""
    pass


class NotAGitRepositoryError(HistoryError):
    def __init__(self, path: Path):
        super().__init__("Not a git repository", details={"path": str(path)})
        self.path = path


class EmptyHistoryError(HistoryError):
    def __init__(self, path: Path):
        super().__init__("Repository has no commits", details={"path": str(path)})
        self.path = path


class GitCommandError(HistoryError):
    """Raised when a git subprocess fails or cannot be started."""

    def __init__(self, command: str, reason: str):
        super().__init__(
            f"git {command} failed",
            details={"command": command, "reason": reason},
        )
        self.command = command
        self.reason = reason
