"""Common output type of the signal analyzers."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SignalResult:
    """Unweighted signal value in [0, 100] plus human-readable evidence."""

    raw_score: float
    details: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "raw_score", min(100.0, max(0.0, float(self.raw_score))))
        object.__setattr__(self, "details", tuple(self.details))

    @classmethod
    def skipped(cls, note: str) -> "SignalResult":
        """Zero score for a file the analyzer could not handle."""
        return cls(0.0, (note,))
