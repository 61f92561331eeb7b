"""Tests for subprocess results, safety guards and the git workspace."""

from __future__ import annotations

import shlex
import shutil
import subprocess
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from prgate.remediation.workflow import FixTool, RemediationWorkflow
from prgate.workspace.git import GitStateError, GitWorkspace
from prgate.workspace.process import CommandResult, ToolExecutionError, run_command, split_command
from prgate.workspace.safety import SafetyError, validate_branch_for_push, validate_command

# ── CommandResult / run_command ──────────────────────────────────────────────


class TestCommandResult:
    def test_ok(self) -> None:
        r = CommandResult(exit_code=0, stdout="fine", stderr="", duration_ms=3)
        assert r.ok
        r.raise_for_status("build")  # no raise

    def test_raise_uses_last_stderr_line(self) -> None:
        r = CommandResult(exit_code=2, stdout="", stderr="compiling\nerror TS2322: nope\n", duration_ms=3)
        with pytest.raises(ToolExecutionError) as exc:
            r.raise_for_status("Type Check")
        assert exc.value.tool == "Type Check"
        assert exc.value.detail == "error TS2322: nope"
        assert exc.value.exit_code == 2

    def test_raise_without_output(self) -> None:
        r = CommandResult(exit_code=3, stdout="", stderr="", duration_ms=0)
        with pytest.raises(ToolExecutionError, match="exit code 3"):
            r.raise_for_status("Build")

    def test_output_combines_streams(self) -> None:
        r = CommandResult(exit_code=1, stdout="a", stderr="b", duration_ms=0)
        assert r.output == "a\nb"


class TestRunCommand:
    def test_split_command_quotes(self) -> None:
        assert split_command('npx prettier --write "src/**/*.ts"') == ["npx", "prettier", "--write", "src/**/*.ts"]

    def test_captures_exit_code(self, tmp_path: Path) -> None:
        result = run_command([sys.executable, "-c", "import sys; print('hi'); sys.exit(4)"], tmp_path)
        assert result.exit_code == 4
        assert result.stdout.strip() == "hi"
        assert result.duration_ms >= 0

    def test_missing_binary(self, tmp_path: Path) -> None:
        result = run_command("definitely-not-a-real-binary-xyz --version", tmp_path)
        assert result.exit_code == -1
        assert "not found" in result.stderr

    def test_unbalanced_quote_is_a_failed_result(self, tmp_path: Path) -> None:
        result = run_command('npm run "build', tmp_path)
        assert result.exit_code == -1
        assert "Could not parse command" in result.stderr

    def test_timeout(self, tmp_path: Path) -> None:
        result = run_command([sys.executable, "-c", "import time; time.sleep(5)"], tmp_path, timeout_sec=1)
        assert result.exit_code == -1
        assert "timed out" in result.stderr


# ── Safety ───────────────────────────────────────────────────────────────────


class TestSafety:
    @pytest.mark.parametrize("command", [
        "rm -rf /",
        "npm run build && vercel --prod",
        "npm publish",
        "git push origin main",
    ])
    def test_blocked_commands(self, command: str) -> None:
        with pytest.raises(SafetyError):
            validate_command(command)

    def test_normal_commands_allowed(self) -> None:
        validate_command("npm run build")
        validate_command("npx tsc --noEmit")

    def test_main_always_protected(self) -> None:
        with pytest.raises(SafetyError):
            validate_branch_for_push("main")
        with pytest.raises(SafetyError):
            validate_branch_for_push("Master")

    def test_extra_protected(self) -> None:
        with pytest.raises(SafetyError):
            validate_branch_for_push("develop", protected=("develop",))
        validate_branch_for_push("refactor/pr-1-improvements-20240101000000", protected=("develop",))

    def test_empty_branch(self) -> None:
        with pytest.raises(SafetyError):
            validate_branch_for_push("  ")


# ── Isolation (in-memory workspace) ──────────────────────────────────────────


class TestIsolated:
    def test_restores_after_block(self, workspace) -> None:
        ref = workspace.fetch_pull_request(9)
        with workspace.isolated(ref):
            assert workspace.current_branch == "pr-9"
        assert workspace.current_branch == "main"

    def test_restores_when_block_raises(self, workspace) -> None:
        ref = workspace.fetch_pull_request(9)
        with pytest.raises(RuntimeError):
            with workspace.isolated(ref):
                raise RuntimeError("check exploded")
        assert workspace.current_branch == "main"

    def test_restores_when_checkout_fails(self, make_workspace) -> None:
        ws = make_workspace(fail_on={"checkout"})
        with pytest.raises(GitStateError):
            with ws.isolated("pr-9"):
                pytest.fail("block must not run")
        assert ws.calls[-1] == "restore"
        assert ws.current_branch == "main"


# ── Real git ─────────────────────────────────────────────────────────────────


def _git(root: Path, *args: str) -> None:
    subprocess.run(["git", *args], cwd=root, check=True, capture_output=True)


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    if shutil.which("git") is None:
        pytest.skip("git not installed")
    root = tmp_path / "repo"
    root.mkdir()
    _git(root, "init", "-q")
    _git(root, "symbolic-ref", "HEAD", "refs/heads/main")
    _git(root, "config", "user.email", "gate@example.com")
    _git(root, "config", "user.name", "Gate")
    (root / "index.ts").write_text("export const x = 1;\n")
    _git(root, "add", "-A")
    _git(root, "commit", "-q", "-m", "init")
    return root


class TestGitWorkspace:
    def test_current_branch(self, git_repo: Path) -> None:
        assert GitWorkspace(git_repo).current_branch == "main"

    def test_has_changes(self, git_repo: Path) -> None:
        ws = GitWorkspace(git_repo)
        assert not ws.has_changes()
        (git_repo / "new.ts").write_text("export {};\n")
        assert ws.has_changes()

    def test_has_changes_tracked_edit(self, git_repo: Path) -> None:
        ws = GitWorkspace(git_repo)
        (git_repo / "index.ts").write_text("export const x = 2;\n")
        assert ws.has_changes()

    def test_branch_commit_and_restore(self, git_repo: Path) -> None:
        ws = GitWorkspace(git_repo)
        with ws.isolated("refactor/pr-1-improvements-20240101000000", start_point="main"):
            assert ws.current_branch == "refactor/pr-1-improvements-20240101000000"
            (git_repo / "index.ts").write_text("export const x = 3;\n")
            ws.add_all()
            ws.commit("refactor: automated code improvements based on PR #1")
            assert not ws.has_changes()
        assert ws.current_branch == "main"
        assert (git_repo / "index.ts").read_text() == "export const x = 1;\n"

    def test_unknown_ref_still_on_baseline(self, git_repo: Path) -> None:
        ws = GitWorkspace(git_repo)
        with pytest.raises(GitStateError) as exc:
            with ws.isolated("no-such-branch"):
                pass
        assert exc.value.action == "checkout"
        assert ws.current_branch == "main"

    def test_fetch_without_remote_fails(self, git_repo: Path) -> None:
        ws = GitWorkspace(git_repo, remote="origin")
        with pytest.raises(GitStateError) as exc:
            ws.fetch_pull_request(1)
        assert exc.value.action == "fetch"


# ── Clean restore (real git) ─────────────────────────────────────────────────


def _status(root: Path) -> str:
    return subprocess.run(
        ["git", "status", "--porcelain"], cwd=root, check=True, capture_output=True, text=True,
    ).stdout


def _add_pr_branch(root: Path) -> None:
    (root / ".gitignore").write_text("node_modules/\n")
    (root / "package-lock.json").write_text('{"lockfileVersion": 3}\n')
    _git(root, "add", "-A")
    _git(root, "commit", "-q", "-m", "lockfile")
    _git(root, "branch", "pr-1")


def _leave_install_debris(root: Path) -> None:
    (root / "package-lock.json").write_text('{"lockfileVersion": 3, "packages": {}}\n')
    (root / "build.log").write_text("compiled\n")
    (root / "node_modules").mkdir(exist_ok=True)
    (root / "node_modules" / "dep.js").write_text("module.exports = 1;\n")


class TestCleanRestore:
    def test_check_debris_discarded(self, git_repo: Path) -> None:
        _add_pr_branch(git_repo)
        ws = GitWorkspace(git_repo)
        with ws.isolated("pr-1"):
            _leave_install_debris(git_repo)
        assert ws.current_branch == "main"
        assert _status(git_repo) == ""
        assert not ws.has_changes()
        assert not (git_repo / "build.log").exists()
        assert (git_repo / "package-lock.json").read_text() == '{"lockfileVersion": 3}\n'
        assert (git_repo / "node_modules" / "dep.js").exists()

    def test_noop_fixer_after_checks_opens_nothing(self, git_repo: Path, make_pr) -> None:
        _add_pr_branch(git_repo)
        ws = GitWorkspace(git_repo)
        with ws.isolated("pr-1"):
            _leave_install_debris(git_repo)

        client = MagicMock()
        noop = FixTool("No-op", shlex.join([sys.executable, "-c", "pass"]), "nothing")
        outcome = RemediationWorkflow(ws, client, [noop]).run(make_pr(1), [], start_point="pr-1")
        assert outcome.applied_fixes == ["No-op"]
        assert outcome.no_changes
        assert outcome.error is None
        client.create_pull_request.assert_not_called()
        assert ws.current_branch == "main"
        assert _status(git_repo) == ""

    def test_failed_commit_discards_fixer_edits(self, git_repo: Path, make_pr) -> None:
        _add_pr_branch(git_repo)
        hook = git_repo / ".git" / "hooks" / "pre-commit"
        hook.parent.mkdir(parents=True, exist_ok=True)
        hook.write_text("#!/bin/sh\nexit 1\n")
        hook.chmod(0o755)
        ws = GitWorkspace(git_repo)

        client = MagicMock()
        rewrite = FixTool(
            "Rewrite",
            shlex.join([sys.executable, "-c", "open('index.ts', 'w').write('export const x = 9;')"]),
            "rewrite",
        )
        outcome = RemediationWorkflow(ws, client, [rewrite]).run(make_pr(1), [], start_point="pr-1")
        assert "commit" in outcome.error
        client.create_pull_request.assert_not_called()
        assert ws.current_branch == "main"
        assert _status(git_repo) == ""
        assert (git_repo / "index.ts").read_text() == "export const x = 1;\n"
