"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest

from prgate.github.models import PullRequest
from prgate.workspace.git import GitStateError, GitWorkspace


class FakeWorkspace(GitWorkspace):
    """GitWorkspace with the git primitives replaced by in-memory state.

    ``isolated`` and ``restore_baseline`` callers run the real base-class
    logic; ``fail_on`` names operations that raise GitStateError.
    """

    def __init__(
        self,
        root: Path,
        baseline: str = "main",
        fail_on: set[str] | None = None,
        changes: bool = True,
    ) -> None:
        super().__init__(root, baseline=baseline)
        self.branch = baseline
        self.branches = {baseline}
        self.fail_on = set(fail_on or ())
        self.changes = changes
        self.calls: list[str] = []
        self.commits: list[str] = []
        self.pushed: list[str] = []

    def _op(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail_on:
            raise GitStateError(name, "simulated failure")

    @property
    def current_branch(self) -> str:
        return self.branch

    def fetch_pull_request(self, number: int) -> str:
        self._op("fetch")
        ref = f"pr-{number}"
        self.branches.add(ref)
        return ref

    def checkout(self, ref: str) -> None:
        self._op("checkout")
        if ref not in self.branches:
            raise GitStateError("checkout", f"unknown ref {ref}")
        self.branch = ref

    def create_branch(self, name: str, start_point: str | None = None) -> None:
        self._op("branch")
        self.branches.add(name)
        self.branch = name

    def has_changes(self) -> bool:
        self._op("diff")
        return self.changes

    def add_all(self) -> None:
        self._op("add")

    def commit(self, message: str) -> None:
        self._op("commit")
        self.commits.append(message)

    def push(self, branch: str) -> None:
        self._op("push")
        self.pushed.append(branch)

    def restore_baseline(self) -> None:
        self._op("restore")
        self.branch = self.baseline


@pytest.fixture
def make_workspace(tmp_path: Path) -> Callable[..., FakeWorkspace]:
    def _make(**kwargs: Any) -> FakeWorkspace:
        return FakeWorkspace(tmp_path, **kwargs)
    return _make


@pytest.fixture
def workspace(make_workspace: Callable[..., FakeWorkspace]) -> FakeWorkspace:
    return make_workspace()


@pytest.fixture
def make_pr() -> Callable[..., PullRequest]:
    def _make(
        number: int = 42,
        created_at: str = "2024-01-01T01:00:00Z",
        title: str = "Add feature",
        head_ref: str = "feature/thing",
        from_fork: bool = False,
    ) -> PullRequest:
        head_repo = "someone/app" if from_fork else "acme/app"
        return PullRequest.model_validate({
            "number": number,
            "title": title,
            "head": {"ref": head_ref, "repo": {"full_name": head_repo}},
            "base": {"ref": "main", "repo": {"full_name": "acme/app"}},
            "created_at": created_at,
            "html_url": f"https://github.com/acme/app/pull/{number}",
        })
    return _make


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 1, 2, 12, 0, 0, tzinfo=timezone.utc)
