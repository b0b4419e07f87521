"""
Shared fixtures: deterministic stand-ins for git and the text backend.
"""

from pathlib import Path

import pytest

from autocommit.ai_backends.base import TextBackend
from autocommit.config.settings import Config
from autocommit.errors import CommitFailureError
from autocommit.git_ops.repository import CommitRecord, Operation, RepositoryInspector


class FakeRepository(RepositoryInspector):
    """In-memory repository with a fixed branch, index and history."""

    def __init__(self, branch="main", staged=None, diffs=None, commits=None, reject_commit=False):
        self.branch = branch
        self.staged = list(staged or [])
        self.diffs = dict(diffs or {})
        self.history = list(commits or [])
        self.reject_commit = reject_commit
        self.diff_requests = []
        self.created_commits = []

    @property
    def root(self) -> Path:
        return Path("/nonexistent/fake-repo")

    def current_branch(self):
        return self.branch

    def staged_files(self):
        return list(self.staged)

    def staged_diff(self, path):
        self.diff_requests.append(path)
        return self.diffs.get(path, "")

    def recent_commits(self, count):
        return self.history[:count]

    def commit(self, message):
        if self.reject_commit:
            raise CommitFailureError("pre-commit hook failed")
        self.created_commits.append(message)
        return "f00dfeed" * 5


class FakeBackend(TextBackend):
    """Replays canned responses and records every prompt it was given."""

    def __init__(self, *responses):
        super().__init__()
        self.responses = list(responses)
        self.calls = []

    @property
    def prompts(self):
        return [prompt for prompt, _ in self.calls]

    def complete(self, prompt, model):
        self.calls.append((prompt, model))
        return self.responses.pop(0) if self.responses else ""


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep AUTOCOMMIT_* variables from the developer's shell out of tests."""
    for name in ("AUTOCOMMIT_MODEL", "AUTOCOMMIT_VERBOSE", "AUTOCOMMIT_BACKEND",
                 "AUTOCOMMIT_API_URL", "AUTOCOMMIT_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config():
    return Config(model="test-model")


@pytest.fixture
def ten_line_diff():
    return "\n".join(
        ["diff --git a/auth.py b/auth.py", "--- a/auth.py", "+++ b/auth.py", "@@ -1,3 +1,7 @@"]
        + [f"+def login_step_{i}(): pass" for i in range(6)]
    )


@pytest.fixture
def history():
    return [
        CommitRecord("a1b2c3d", "Add login form"),
        CommitRecord("b2c3d4e", "Fix session timeout"),
        CommitRecord("c3d4e5f", "Update README"),
    ]


@pytest.fixture
def make_repository():
    def factory(**kwargs):
        return FakeRepository(**kwargs)
    return factory


@pytest.fixture
def make_backend():
    def factory(*responses):
        return FakeBackend(*responses)
    return factory
