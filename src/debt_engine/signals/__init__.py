"""Signal analyzers. Each produces a SignalResult in [0, 100]."""

from .base import SignalResult
from .churn import churn_threshold, score_churn
from .complexity import measure, score_complexity
from .coupling import coupling_ratio, score_change_coupling, score_coupling_index
from .coverage import CoverageIndex, is_test_file
from .knowledge import score_knowledge
from .smells import SmellCounts, count_smells, score_smells
from .staleness import score_staleness

__all__ = [
    "CoverageIndex",
    "SignalResult",
    "SmellCounts",
    "churn_threshold",
    "count_smells",
    "coupling_ratio",
    "is_test_file",
    "measure",
    "score_change_coupling",
    "score_churn",
    "score_complexity",
    "score_coupling_index",
    "score_knowledge",
    "score_smells",
    "score_staleness",
]
