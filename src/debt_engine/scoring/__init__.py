"""Composite scoring, weights, result aggregation and remediation hints."""

from .composite import build_components, compute_composite_score, reweight, score_file
from .models import (
    AnalysisProgress,
    AnalysisResult,
    ComponentScore,
    CouplingPair,
    DebtSnapshot,
    FileBreakdown,
    FileScore,
    NamedComponent,
    SupervisionStatus,
)
from .result import breakdown, map_files, merge_file_score
from .roi import compute_roi_estimate, estimate_effort, suggest_actions
from .supervision import SupervisionRecord, apply_supervision, supervision_status
from .weights import (
    COMPONENT_KEYS,
    DEFAULT_WEIGHTS,
    default_weights,
    is_normalized,
    normalize_weights,
    set_weight,
)

__all__ = [
    "AnalysisProgress",
    "AnalysisResult",
    "ComponentScore",
    "CouplingPair",
    "DebtSnapshot",
    "FileBreakdown",
    "FileScore",
    "NamedComponent",
    "SupervisionStatus",
    "SupervisionRecord",
    "COMPONENT_KEYS",
    "DEFAULT_WEIGHTS",
    "apply_supervision",
    "breakdown",
    "build_components",
    "compute_composite_score",
    "compute_roi_estimate",
    "default_weights",
    "estimate_effort",
    "is_normalized",
    "map_files",
    "merge_file_score",
    "normalize_weights",
    "reweight",
    "score_file",
    "set_weight",
    "suggest_actions",
    "supervision_status",
]
