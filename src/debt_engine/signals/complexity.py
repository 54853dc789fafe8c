"""Complexity signal: per-function cyclomatic complexity rolled up per file."""

from __future__ import annotations

from ..exceptions import ParsingError
from ..logging_config import get_logger
from ..scanning.complexity import ComplexityParser, ComplexityReport
from .base import SignalResult

logger = get_logger(__name__)

# Emphasized complexity at which a file scores 100.
COMPLEXITY_CEILING = 20.0


def measure(parser: ComplexityParser, source: bytes, relative_path: str) -> ComplexityReport:
    """Run a parser, turning parse failures into an annotated empty report."""
    try:
        return parser.analyze(source)
    except ParsingError as e:
        logger.debug("Complexity skipped for %s: %s", relative_path, e.reason)
        return ComplexityReport(note=f"parse error: {e.reason}")
    except (ValueError, RuntimeError) as e:
        logger.debug("Complexity skipped for %s: %s", relative_path, e)
        return ComplexityReport(note=f"parse error: {e}")


def score_complexity(report: ComplexityReport) -> SignalResult:
    """Score a report.

    The file value is the average of its worst and its mean function, so one
    monster function dominates, yet a file full of moderately complex
    functions still scores higher than a file with a single one.
    """
    if not report.functions:
        return SignalResult.skipped(report.note or "no functions found")

    emphasized = 0.5 * report.max_complexity + 0.5 * report.mean_complexity
    raw = min(100.0, emphasized / COMPLEXITY_CEILING * 100.0)
    details = [
        f"max {report.max_complexity}, avg {report.mean_complexity:.1f} "
        f"across {len(report.functions)} functions"
    ]
    details.extend(f"{f.name} (line {f.line}): {f.complexity}" for f in report.top(3))
    return SignalResult(raw, tuple(details))
