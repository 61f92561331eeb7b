"""Tests for check registry loading and daemon wiring."""

from __future__ import annotations

from pathlib import Path

import pytest

from prgate.config import Settings
from prgate.harness.registry import default_checks, load_checks, resolve_checks
from prgate.main import build_daemon
from prgate.workspace.safety import SafetyError


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


# ── Defaults ─────────────────────────────────────────────────────────────────


class TestDefaultChecks:
    def test_order_and_criticality(self) -> None:
        checks = default_checks(_settings())
        assert [c.name for c in checks] == [
            "Install Dependencies", "Build", "Type Check", "Lint", "Dependency Audit",
            "Code Quality", "Bundle Size", "Security Scan", "Accessibility",
        ]
        assert [c.name for c in checks if c.critical] == ["Install Dependencies", "Build", "Type Check"]

    def test_empty_command_disables_check(self) -> None:
        checks = default_checks(_settings(audit_command="", lint_command=""))
        names = [c.name for c in checks]
        assert "Dependency Audit" not in names
        assert "Lint" not in names

    def test_dangerous_command_rejected(self) -> None:
        with pytest.raises(SafetyError):
            default_checks(_settings(build_command="npm run build && git push origin main"))

    def test_unbalanced_quote_rejected(self) -> None:
        with pytest.raises(ValueError, match="Build"):
            default_checks(_settings(build_command='npm run "build'))


# ── YAML ─────────────────────────────────────────────────────────────────────


class TestLoadChecks:
    def test_loads_in_order(self, tmp_path: Path) -> None:
        path = tmp_path / "checks.yaml"
        path.write_text(
            "checks:\n"
            "  - name: Build\n"
            "    command: pnpm build\n"
            "    critical: true\n"
            "  - name: Lint\n"
            "    kind: lint\n"
            "    command: pnpm lint\n"
            "  - name: Security Scan\n"
            "    kind: security-scan\n"
        )
        checks = load_checks(path)
        assert [(c.name, c.critical) for c in checks] == [
            ("Build", True), ("Lint", False), ("Security Scan", False),
        ]

    def test_resolve_prefers_file(self, tmp_path: Path) -> None:
        path = tmp_path / "checks.yaml"
        path.write_text("checks:\n  - name: Build\n    command: make\n    critical: true\n")
        checks = resolve_checks(_settings(checks_file=str(path)))
        assert [c.name for c in checks] == ["Build"]

    @pytest.mark.parametrize("content", [
        "checks: []\n",
        "something_else: 1\n",
        "checks:\n  - just a string\n",
        "checks:\n  - name: X\n    kind: telepathy\n",
        "checks:\n  - name: Build\n    kind: command\n",
        "checks:\n  - kind: accessibility\n",
        "checks: [unclosed\n",
        "checks:\n  - name: Build\n    command: npm run \"build\n",
    ])
    def test_invalid_files(self, tmp_path: Path, content: str) -> None:
        path = tmp_path / "checks.yaml"
        path.write_text(content)
        with pytest.raises(ValueError):
            load_checks(path)

    def test_blocked_command(self, tmp_path: Path) -> None:
        path = tmp_path / "checks.yaml"
        path.write_text("checks:\n  - name: Ship\n    command: npm publish\n")
        with pytest.raises(SafetyError):
            load_checks(path)


# ── Wiring ───────────────────────────────────────────────────────────────────


class TestBuildDaemon:
    def test_requires_repository(self) -> None:
        with pytest.raises(ValueError, match="GITHUB_OWNER"):
            build_daemon(_settings())

    def test_rejects_unsupported_schedule(self) -> None:
        with pytest.raises(ValueError, match="Unsupported schedule"):
            build_daemon(_settings(github_owner="acme", github_repo="app", check_interval="15 3 * * 1"))

    def test_wires_components(self, tmp_path: Path) -> None:
        cfg = _settings(
            github_owner="acme",
            github_repo="app",
            repo_path=str(tmp_path),
            check_interval="*/5 * * * *",
            checkpoint_file=str(tmp_path / ".last-pr-check"),
            enable_auto_refactoring=False,
        )
        daemon = build_daemon(cfg)
        assert daemon.interval == 300
        assert daemon.orchestrator.enable_auto_refactoring is False
        assert daemon.orchestrator.workspace.root == tmp_path.resolve()
        assert [t.name for t in daemon.orchestrator.remediation.fix_tools] == ["ESLint fix", "Prettier"]
        assert daemon.checkpoint.path == tmp_path / ".last-pr-check"
