"""Tests for tree-sitter cyclomatic complexity."""

import pytest

from debt_engine.exceptions import ParsingError
from debt_engine.scanning.complexity import (
    GRAMMARS,
    ParserRegistry,
    UnsupportedLanguageParser,
)

PYTHON_SOURCE = b'''\
def classify(x):
    if x > 0 and x < 10:
        return "small"
    elif x < 0:
        return "negative"
    for i in range(3):
        try:
            pass
        except ValueError:
            pass
    return "big"


def simple():
    return 1


square = lambda v: v * v if v else 0
'''

JS_SOURCE = b"""\
function check(a, b) {
  if (a && b) { return 1; }
  switch (a) {
    case 1: return 2;
    case 2: return 3;
    default: return 0;
  }
}
const pick = (x) => x ? 1 : 2;
"""

GO_SOURCE = b"""\
package main

func Run(n int) int {
\tfor i := 0; i < n; i++ {
\t\tif i%2 == 0 && i > 2 {
\t\t\treturn i
\t\t}
\t}
\treturn 0
}
"""


def _by_name(report):
    return {f.name: f.complexity for f in report.functions}


@pytest.fixture(scope="module")
def registry():
    return ParserRegistry()


class TestPython:
    def test_function_complexity(self, registry):
        pytest.importorskip("tree_sitter_python")
        report = registry.for_path("app.py", "python").analyze(PYTHON_SOURCE)
        complexities = _by_name(report)
        # if + and + elif + for + except
        assert complexities["classify"] == 6
        assert complexities["simple"] == 1
        assert complexities["square"] == 2
        assert "<module>" not in complexities

    def test_line_numbers(self, registry):
        pytest.importorskip("tree_sitter_python")
        report = registry.for_path("app.py", "python").analyze(PYTHON_SOURCE)
        lines = {f.name: f.line for f in report.functions}
        assert lines["classify"] == 1
        assert lines["simple"] == 14

    def test_module_level_branches(self, registry):
        pytest.importorskip("tree_sitter_python")
        report = registry.for_path("script.py", "python").analyze(b"if True:\n    x = 1\n")
        assert _by_name(report) == {"<module>": 2}

    def test_syntax_error(self, registry):
        pytest.importorskip("tree_sitter_python")
        with pytest.raises(ParsingError):
            registry.for_path("broken.py", "python").analyze(b"def broken(:\n")


class TestJavaScript:
    def test_function_complexity(self, registry):
        pytest.importorskip("tree_sitter_javascript")
        report = registry.for_path("app.js", "javascript").analyze(JS_SOURCE)
        complexities = _by_name(report)
        # if + && + two case clauses; default does not count
        assert complexities["check"] == 5
        assert complexities["pick"] == 2


class TestGo:
    def test_function_complexity(self, registry):
        pytest.importorskip("tree_sitter_go")
        report = registry.for_path("main.go", "go").analyze(GO_SOURCE)
        assert _by_name(report) == {"Run": 4}


class TestParserRegistry:
    def test_tsx_gets_its_own_grammar(self, registry):
        pytest.importorskip("tree_sitter_typescript")
        assert registry.for_path("web/App.tsx", "typescript").language == "tsx"
        assert registry.for_path("web/api.ts", "typescript").language == "typescript"

    def test_parsers_are_cached(self, registry):
        assert registry.for_path("a.py", "python") is registry.for_path("b.py", "python")

    def test_unsupported_language(self, registry):
        parser = registry.for_path("legacy.cob", "cobol")
        assert isinstance(parser, UnsupportedLanguageParser)
        report = parser.analyze(b"IDENTIFICATION DIVISION.")
        assert report.functions == ()
        assert "cobol" in report.note

    def test_every_scored_language_has_a_grammar(self):
        for language in ("python", "javascript", "typescript", "go", "rust", "java"):
            assert language in GRAMMARS
