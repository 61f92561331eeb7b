"""Git operations on the single local checkout the pipeline owns.

The checkout is shared by the harness and the remediation workflow, so
every isolated operation goes through ``GitWorkspace.isolated`` which
restores the baseline branch on every exit path.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from .process import CommandResult, run_command

logger = logging.getLogger(__name__)


class GitStateError(Exception):
    """Raised when a git operation leaves the checkout in an unexpected state."""

    def __init__(self, action: str, detail: str) -> None:
        self.action = action
        self.detail = detail
        super().__init__(f"git {action} failed: {detail}")


class GitWorkspace:
    """Thin wrapper over the git CLI for one working tree."""

    def __init__(
        self,
        root: Path | str,
        baseline: str = "main",
        remote: str = "origin",
        timeout_sec: int = 120,
    ) -> None:
        self.root = Path(root)
        self.baseline = baseline
        self.remote = remote
        self.timeout_sec = timeout_sec

    # ── Low level ─────────────────────────────────────────────────────────

    def _git(self, *args: str, timeout_sec: int | None = None) -> CommandResult:
        return run_command(["git", *args], self.root, timeout_sec or self.timeout_sec)

    def _git_ok(self, action: str, *args: str, timeout_sec: int | None = None) -> CommandResult:
        result = self._git(*args, timeout_sec=timeout_sec)
        if not result.ok:
            detail = (result.stderr or result.stdout).strip() or f"exit code {result.exit_code}"
            raise GitStateError(action, detail)
        return result

    # ── Queries ───────────────────────────────────────────────────────────

    @property
    def current_branch(self) -> str:
        result = self._git_ok("rev-parse", "rev-parse", "--abbrev-ref", "HEAD")
        return result.stdout.strip()

    def has_changes(self) -> bool:
        """True when the tree differs from HEAD (tracked edits or new files)."""
        diff = self._git("diff", "--quiet", "--exit-code")
        if diff.exit_code not in (0, 1):
            raise GitStateError("diff", diff.stderr.strip() or f"exit code {diff.exit_code}")
        if diff.exit_code == 1:
            return True
        untracked = self._git_ok("ls-files", "ls-files", "--others", "--exclude-standard")
        return bool(untracked.stdout.strip())

    # ── Mutations ─────────────────────────────────────────────────────────

    def fetch_pull_request(self, number: int) -> str:
        """Fetch a pull request head into a local ref and return its name."""
        local_ref = f"pr-{number}"
        self._git_ok(
            "fetch",
            "fetch", self.remote, f"+pull/{number}/head:{local_ref}",
            timeout_sec=max(self.timeout_sec, 300),
        )
        return local_ref

    def checkout(self, ref: str) -> None:
        self._git_ok("checkout", "checkout", ref)

    def create_branch(self, name: str, start_point: str | None = None) -> None:
        args = ["checkout", "-b", name]
        if start_point:
            args.append(start_point)
        self._git_ok("branch", *args)

    def add_all(self) -> None:
        self._git_ok("add", "add", "-A")

    def commit(self, message: str) -> None:
        self._git_ok("commit", "commit", "-m", message)

    def push(self, branch: str) -> None:
        self._git_ok("push", "push", "-u", self.remote, branch, timeout_sec=max(self.timeout_sec, 300))

    def restore_baseline(self) -> None:
        """Switch back to the baseline branch with a clean working tree.

        Tracked edits and untracked files left behind by checks or fixers
        (lockfile rewrites, stray build output) are discarded so they never
        reach the next checkout. Ignored paths such as node_modules survive.
        """
        self._git_ok("checkout", "checkout", "--force", self.baseline)
        self._git_ok("reset", "reset", "--hard", "HEAD")
        self._git_ok("clean", "clean", "-fd")
        logger.debug("Restored clean checkout of %s", self.baseline)

    @contextmanager
    def isolated(self, ref: str, start_point: str | None = None) -> Iterator[str]:
        """Check out ``ref`` (or create it from ``start_point``) for the block.

        The baseline branch is restored, and the tree cleaned, when the block
        exits, including when checking out ``ref`` itself fails.
        """
        try:
            if start_point is not None:
                self.create_branch(ref, start_point)
            else:
                self.checkout(ref)
            yield ref
        finally:
            self.restore_baseline()
