"""Shared test fixtures for Code Archaeologist tests."""

import os
import shutil
import subprocess
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, Optional

import pytest

from code_archaeologist.temporal.clock import fixed_clock

# Reference "now" for every age computed in the tests
NOW = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


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


class GitRepo:
    """A throwaway repository whose commits carry explicit dates and authors."""

    def __init__(self, path: Path):
        self.path = path
        self.git("init", "-q")
        self.git("config", "user.email", "test@test.com")
        self.git("config", "user.name", "Test")
        self.git("config", "commit.gpgsign", "false")

    def git(self, *args: str, env: Optional[Dict[str, str]] = None) -> str:
        result = subprocess.run(
            ["git", "-C", str(self.path), *args],
            capture_output=True,
            text=True,
            env=env,
            check=True,
        )
        return result.stdout

    def write(self, name: str, content: str) -> Path:
        target = self.path / name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content)
        return target

    def commit(
        self,
        message: str,
        files: Optional[Dict[str, str]] = None,
        date: str = "2024-01-01T12:00:00+00:00",
        author: str = "Alice",
        remove: Iterable[str] = (),
    ) -> str:
        """Write ``files``, stage everything and commit; returns the full hash."""
        for name, content in (files or {}).items():
            self.write(name, content)
        for name in remove:
            (self.path / name).unlink()
        self.git("add", "-A")

        email = f"{author.lower()}@test.com"
        env = {
            **os.environ,
            "GIT_AUTHOR_NAME": author,
            "GIT_AUTHOR_EMAIL": email,
            "GIT_AUTHOR_DATE": date,
            "GIT_COMMITTER_NAME": author,
            "GIT_COMMITTER_EMAIL": email,
            "GIT_COMMITTER_DATE": date,
        }
        self.git("commit", "-q", "--allow-empty", "-m", message, env=env)
        return self.git("rev-parse", "HEAD").strip()


@pytest.fixture
def now():
    """Reference time for age assertions: 2025-01-01T12:00:00Z."""
    return NOW


@pytest.fixture
def clock():
    """Clock pinned to NOW."""
    return fixed_clock(NOW)


@pytest.fixture
def git_repo(tmp_path):
    """Empty repository in a temporary directory."""
    if shutil.which("git") is None:
        pytest.skip("git not found")
    root = tmp_path / "repo"
    root.mkdir()
    return GitRepo(root)


APP_V1 = """function handleRequest(req) {
  if (req.a && req.b) {
    return 1;
  }
  return 0;
}

function other() {
  return 2;
}
"""

APP_V2 = """function handleRequest(req) {
  if (req.a && req.b) {
    return 1;
  }
  let total = 0;
  for (const x of req.items) {
    total += x;
  }
  return total;
}

function other() {
  return 2;
}
"""

APP_V3 = APP_V2.replace("return 2;", "return 3;")


@pytest.fixture
def app_repo(git_repo):
    """Three dated commits over app.js and util.js.

    c1 2024-01-01 Alice  "Add request handler"       (root: app.js, util.js)
    c2 2024-02-01 Bob    "Fix bug in handleRequest"  (app.js, util.js)
    c3 2024-03-01 Alice  "Update other"              (app.js, util.js)
    """
    git_repo.hashes = [
        git_repo.commit(
            "Add request handler",
            {"app.js": APP_V1, "util.js": "export const a = 1;\n"},
            date="2024-01-01T12:00:00+00:00",
            author="Alice",
        ),
        git_repo.commit(
            "Fix bug in handleRequest",
            {"app.js": APP_V2, "util.js": "export const a = 2;\n"},
            date="2024-02-01T12:00:00+00:00",
            author="Bob",
        ),
        git_repo.commit(
            "Update other",
            {"app.js": APP_V3, "util.js": "export const a = 3;\n"},
            date="2024-03-01T12:00:00+00:00",
            author="Alice",
        ),
    ]
    return git_repo
