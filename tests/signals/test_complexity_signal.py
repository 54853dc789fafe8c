"""Tests for rolling function complexity up into a file score."""

import pytest

from debt_engine.exceptions import ParsingError
from debt_engine.scanning.complexity import (
    ComplexityParser,
    ComplexityReport,
    FunctionComplexity,
    UnsupportedLanguageParser,
)
from debt_engine.signals.complexity import measure, score_complexity


class _BrokenParser(ComplexityParser):
    language = "python"

    def analyze(self, source: bytes) -> ComplexityReport:
        raise ParsingError("broken.py", "python", "syntax tree contains errors")


class TestScoreComplexity:
    def test_emphasizes_worst_function(self):
        report = ComplexityReport(
            functions=(FunctionComplexity("parse", 1, 10), FunctionComplexity("helper", 20, 2))
        )
        result = score_complexity(report)
        # 0.5 * max(10) + 0.5 * mean(6) = 8, over a ceiling of 20
        assert result.raw_score == pytest.approx(40.0)
        assert result.details[0] == "max 10, avg 6.0 across 2 functions"
        assert result.details[1] == "parse (line 1): 10"

    def test_capped(self):
        report = ComplexityReport(functions=(FunctionComplexity("monster", 1, 90),))
        assert score_complexity(report).raw_score == 100.0

    def test_trivial_functions_score_low(self):
        report = ComplexityReport(functions=(FunctionComplexity("f", 1, 1),))
        assert score_complexity(report).raw_score == pytest.approx(5.0)

    def test_monotonic_in_max(self):
        scores = [
            score_complexity(ComplexityReport(functions=(FunctionComplexity("f", 1, c),))).raw_score
            for c in range(1, 30)
        ]
        assert scores == sorted(scores)

    def test_no_functions(self):
        result = score_complexity(ComplexityReport())
        assert result.raw_score == 0.0
        assert result.details == ("no functions found",)


class TestMeasure:
    def test_parse_error_becomes_note(self):
        report = measure(_BrokenParser(), b"def (", "broken.py")
        assert report.functions == ()
        assert report.note == "parse error: syntax tree contains errors"
        assert score_complexity(report).raw_score == 0.0

    def test_unsupported_language(self):
        report = measure(UnsupportedLanguageParser("cobol"), b"", "x.cob")
        result = score_complexity(report)
        assert result.raw_score == 0.0
        assert "cobol" in result.details[0]
