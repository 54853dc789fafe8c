"""
Debt Engine - per-file technical debt scoring for git workspaces.

Combines eight signals (churn, complexity, coupling, knowledge
concentration, smells, coverage gaps, documentation staleness and change
coupling) into a weighted composite in [0, 100] per file, aggregated into a
workspace score.
"""

__version__ = "0.1.0"

from .config import AnalysisConfig, load_config
from .engine import DebtEngine, WorkspaceManager
from .scoring.models import (
    AnalysisProgress,
    AnalysisResult,
    CouplingPair,
    DebtSnapshot,
    FileBreakdown,
    FileScore,
)

__all__ = [
    "DebtEngine",  # Main entry point
    "WorkspaceManager",
    "AnalysisConfig",
    "load_config",
    "AnalysisProgress",
    "AnalysisResult",
    "CouplingPair",
    "DebtSnapshot",
    "FileBreakdown",
    "FileScore",
]
