"""Tests for per-file signal computation and its recovery paths."""

from datetime import datetime, timezone

import pytest

from debt_engine.config import AnalysisConfig
from debt_engine.pipeline import (
    LocalFacts,
    WorkspaceContext,
    analyze_local,
    analyze_source,
    assemble_signals,
)
from debt_engine.scanning.complexity import ParserRegistry
from debt_engine.scanning.files import SourceFile
from debt_engine.scanning.imports import ImportGraph
from debt_engine.scoring.weights import COMPONENT_KEYS
from debt_engine.signals.base import SignalResult
from debt_engine.temporal.history import build_history
from debt_engine.temporal.models import Commit

T0 = datetime(2025, 3, 1, tzinfo=timezone.utc)


@pytest.fixture(scope="module")
def parsers():
    return ParserRegistry()


def _source(data, relative_path="app.py", too_large=False, line_count=None):
    return SourceFile(
        path=f"/repo/{relative_path}",
        relative_path=relative_path,
        language="python",
        data=data,
        last_modified=T0,
        too_large=too_large,
        line_count=line_count,
    )


class TestAnalyzeSource:
    def test_clean_file(self, parsers):
        facts = analyze_source(
            _source(b"import os\n\n\ndef run(x):\n    return x\n"), parsers, AnalysisConfig()
        )
        assert facts.relative_path == "app.py"
        assert facts.loc == 3
        assert facts.last_modified == T0
        assert facts.imports == ("os",)
        assert facts.smells.details[0] == "0 smells in 3 LOC"

    def test_binary_content(self, parsers):
        facts = analyze_source(_source(b"\x00\x01import os\n"), parsers, AnalysisConfig())
        assert facts.complexity == SignalResult.skipped("binary content")
        assert facts.smells.details == ("binary content",)
        assert facts.imports == ()

    def test_invalid_utf8(self, parsers):
        latin = "x = 'caf\xe9'\n".encode("latin-1")
        facts = analyze_source(_source(latin), parsers, AnalysisConfig())
        assert facts.smells == SignalResult.skipped("not valid UTF-8")
        assert facts.imports == ()
        assert facts.loc == 1

    def test_too_large_is_not_scanned(self, parsers):
        source = _source(b"import os\nimport sys\n", too_large=True, line_count=40000)
        facts = analyze_source(source, parsers, AnalysisConfig())
        assert facts.complexity.details == ("file larger than 512 KB, not parsed",)
        assert facts.smells.raw_score == 0.0
        assert facts.imports == ()
        assert facts.loc == 40000

    def test_parse_error(self, parsers):
        pytest.importorskip("tree_sitter_python")
        facts = analyze_source(_source(b"def broken(:\n"), parsers, AnalysisConfig())
        assert facts.complexity.raw_score == 0.0
        assert facts.complexity.details[0].startswith("parse error")
        assert facts.smells.details[0] == "0 smells in 1 LOC"


class TestAnalyzeLocal:
    def test_reads_file(self, tmp_path, parsers):
        (tmp_path / "app.py").write_text("import json\n")
        facts = analyze_local(tmp_path, "app.py", parsers, AnalysisConfig())
        assert facts.imports == ("json",)
        assert facts.path == str(tmp_path / "app.py")

    def test_missing_file(self, tmp_path, parsers):
        facts = analyze_local(tmp_path, "gone.py", parsers, AnalysisConfig())
        assert facts.loc == 0
        assert facts.language == "python"
        assert facts.complexity.details == ("unreadable: file not found",)
        assert facts.smells.details == ("unreadable: file not found",)


def _context(workspace, blame=None):
    commits = [
        Commit("a1", 1_700_000_000, "Alice", ("app.py", "util.py")),
        Commit("a2", 1_700_100_000, "Alice", ("app.py", "util.py")),
        Commit("a3", 1_700_200_000, "Bob", ("app.py",)),
    ]
    history = build_history(
        commits, head_sha="a3", window_days=90, max_files_per_commit=50, blame=blame
    )
    graph = ImportGraph.build(
        {"app.py": ["util"], "util.py": []}, {"app.py": "python", "util.py": "python"}
    )
    return WorkspaceContext.build(workspace, history, graph, 90)


def _facts(relative_path="app.py"):
    return LocalFacts(
        path=f"/repo/{relative_path}",
        relative_path=relative_path,
        language="python",
        loc=10,
        last_modified=T0,
        imports=("util",),
        complexity=SignalResult(20.0, ("complex",)),
        smells=SignalResult(10.0, ("smelly",)),
    )


class TestAssembleSignals:
    def test_all_components(self, tmp_path):
        signals = assemble_signals(_facts(), _context(tmp_path), AnalysisConfig())
        assert set(signals) == set(COMPONENT_KEYS)
        assert all(0.0 <= s.raw_score <= 100.0 for s in signals.values())

    def test_local_facts_pass_through(self, tmp_path):
        signals = assemble_signals(_facts(), _context(tmp_path), AnalysisConfig())
        assert signals["cyclomatic_complexity"].details == ("complex",)
        assert signals["code_smell_density"].details == ("smelly",)

    def test_history_signals(self, tmp_path):
        signals = assemble_signals(_facts(), _context(tmp_path), AnalysisConfig())
        assert "3 commits in window" in signals["churn_rate"].details
        assert signals["change_coupling"].raw_score > 0.0
        assert signals["coupling_index"].raw_score > 0.0

    def test_owners_override_blame(self, tmp_path):
        context = _context(tmp_path, blame={"app.py": {"Alice": 5, "Bob": 5}})
        config = AnalysisConfig()
        shared = assemble_signals(_facts(), context, config)
        solo = assemble_signals(_facts(), context, config, owners={"Alice": 10})
        assert (
            solo["knowledge_concentration"].raw_score
            > shared["knowledge_concentration"].raw_score
        )
