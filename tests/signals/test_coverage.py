"""Tests for the test coverage gap heuristic."""

import pytest

from debt_engine.signals.coverage import (
    TESTED_SCORE,
    UNTESTED_SCORE,
    CoverageIndex,
    candidate_test_paths,
    is_test_file,
)


def _touch(root, relative_path):
    path = root / relative_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("")
    return path


class TestIsTestFile:
    @pytest.mark.parametrize(
        "path",
        [
            "tests/test_app.py",
            "pkg/app_test.go",
            "web/app.test.ts",
            "web/app.spec.js",
            "web/__tests__/widget.js",
            "src/main/AppTest.java",
        ],
    )
    def test_detects_tests(self, path):
        assert is_test_file(path)

    @pytest.mark.parametrize("path", ["src/app.py", "web/contest.ts", "lib/attestation.rs"])
    def test_regular_sources(self, path):
        assert not is_test_file(path)


class TestCandidateTestPaths:
    def test_python_locations(self):
        candidates = [str(p) for p in candidate_test_paths("pkg/app.py")]
        assert "pkg/test_app.py" in candidates
        assert "tests/test_app.py" in candidates
        assert "pkg/__tests__/app.test.py" in candidates


class TestCoverageIndex:
    def test_test_file_scores_zero(self, tmp_path):
        result = CoverageIndex(tmp_path).score("tests/test_app.py")
        assert result.raw_score == 0.0

    def test_co_located_test_found(self, tmp_path):
        _touch(tmp_path, "src/app.py")
        _touch(tmp_path, "tests/test_app.py")
        result = CoverageIndex(tmp_path).score("src/app.py")
        assert result.raw_score == TESTED_SCORE == 30.0
        assert result.details == ("tests found at tests/test_app.py",)

    def test_js_spec_file(self, tmp_path):
        _touch(tmp_path, "web/button.spec.ts")
        assert CoverageIndex(tmp_path).score("web/button.ts").raw_score == TESTED_SCORE

    def test_no_tests(self, tmp_path):
        _touch(tmp_path, "src/app.py")
        result = CoverageIndex(tmp_path).score("src/app.py")
        assert result.raw_score == UNTESTED_SCORE == 80.0

    def test_lcov_report_takes_precedence(self, tmp_path):
        report = _touch(tmp_path, "coverage/lcov.info")
        report.write_text("TN:\nSF:src/covered.py\nDA:1,1\nend_of_record\n")
        _touch(tmp_path, "tests/test_uncovered.py")

        index = CoverageIndex(tmp_path)
        assert index.score("src/covered.py").raw_score == TESTED_SCORE
        # A co-located test does not count when the report omits the file.
        assert index.score("src/uncovered.py").raw_score == UNTESTED_SCORE
