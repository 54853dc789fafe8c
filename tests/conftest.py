"""Shared test fixtures for Debt Engine tests."""

import os
import shutil
import subprocess
from datetime import datetime, timezone
from pathlib import Path

import pytest

from debt_engine.scoring.composite import score_file
from debt_engine.scoring.weights import COMPONENT_KEYS, DEFAULT_WEIGHTS
from debt_engine.signals.base import SignalResult


def pytest_addoption(parser):
    """Add --run-slow option for slow tests."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="run slow tests",
    )


def pytest_configure(config):
    """Configure slow marker."""
    config.addinivalue_line("markers", "slow: mark test as slow to run")


def pytest_collection_modifyitems(config, items):
    """Skip slow tests unless --run-slow is given."""
    if config.getoption("--run-slow"):
        return
    skip_slow = pytest.mark.skip(reason="need --run-slow option to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path_factory, monkeypatch):
    """Keep the user's ~/.debt-engine.toml and DEBT_ENGINE_* variables out of tests."""
    monkeypatch.setenv("HOME", str(tmp_path_factory.mktemp("home")))
    for key in list(os.environ):
        if key.startswith("DEBT_ENGINE_"):
            monkeypatch.delenv(key)


def make_file_score(path="src/app.py", loc=100, weights=None, **raw_scores):
    """FileScore with the given raw component scores, every other component 0."""
    signals = {key: SignalResult(raw_scores.get(key, 0.0)) for key in COMPONENT_KEYS}
    return score_file(
        path=f"/repo/{path}",
        relative_path=path,
        signals=signals,
        weights=weights or DEFAULT_WEIGHTS,
        loc=loc,
        language="python",
        last_modified=datetime(2025, 1, 1, tzinfo=timezone.utc),
    )


class GitRepo:
    """Throw-away git repository driven through the git CLI."""

    def __init__(self, root: Path):
        self.root = root
        self._env = {
            **os.environ,
            "GIT_AUTHOR_NAME": "Alice",
            "GIT_AUTHOR_EMAIL": "alice@example.com",
            "GIT_COMMITTER_NAME": "Alice",
            "GIT_COMMITTER_EMAIL": "alice@example.com",
        }
        self.git("init", "-q")
        self.git("config", "commit.gpgsign", "false")

    def git(self, *args: str, author: str = "Alice") -> str:
        env = dict(self._env)
        env["GIT_AUTHOR_NAME"] = author
        env["GIT_AUTHOR_EMAIL"] = f"{author.lower()}@example.com"
        result = subprocess.run(
            ["git", *args],
            cwd=self.root,
            env=env,
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout

    def write(self, relative_path: str, content: str) -> Path:
        path = self.root / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path

    def commit(self, files: dict, message: str = "change", author: str = "Alice") -> None:
        for relative_path, content in files.items():
            self.write(relative_path, content)
        self.git("add", "-A")
        self.git("commit", "-q", "-m", message, author=author)


@pytest.fixture
def git_repo(tmp_path):
    """An empty git repository in a temporary directory."""
    if shutil.which("git") is None:
        pytest.skip("git not installed")
    root = tmp_path / "repo"
    root.mkdir()
    return GitRepo(root)


@pytest.fixture
def sample_repo(git_repo):
    """A small repository where core.py and helpers.py always change together."""
    git_repo.commit(
        {
            "core.py": "from helpers import slugify\n\n\ndef run(x):\n    return slugify(x)\n",
            "helpers.py": "def slugify(text):\n    return text.lower()\n",
            "README.md": "# demo\n",
        },
        "initial",
    )
    for i in range(3):
        git_repo.commit(
            {
                "core.py": (
                    "from helpers import slugify\n\n\n"
                    "def run(x):\n"
                    "    if x and len(x) > 3:\n"
                    f"        return slugify(x)  # TODO: v{i}\n"
                    "    return x\n"
                ),
                "helpers.py": f"def slugify(text):\n    return text.lower().strip()  # {i}\n",
            },
            f"tweak {i}",
        )
    git_repo.commit(
        {"report.py": "def render(rows):\n    return '\\n'.join(rows)\n"},
        "add report",
        author="Bob",
    )
    return git_repo


@pytest.fixture
def file_score_factory():
    return make_file_score
