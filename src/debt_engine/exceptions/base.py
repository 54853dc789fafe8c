"""Root of the debt engine exception hierarchy."""

from typing import Mapping, Optional


class DebtEngineError(Exception):
    """Anything the engine reports to its caller.

    ``details`` holds the structured context (path, key, reason...) and is
    appended to the message as ``key=value`` pairs.
    """

    def __init__(self, message: str, details: Optional[Mapping[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.details = dict(details or {})

    def __str__(self) -> str:
        if not self.details:
            return self.message
        context = ", ".join(f"{key}={value}" for key, value in self.details.items())
        return f"{self.message} ({context})"
