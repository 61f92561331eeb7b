"""Check definitions and runners for the test harness.

Each check runner takes a CheckContext and returns a list of warning
strings. Failure is signalled by raising ToolExecutionError; the harness
decides what a failure means from the check's ``critical`` flag.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from prgate.analyzer.base import iter_files
from prgate.workspace.process import ToolExecutionError, run_command

logger = logging.getLogger(__name__)

# Advisory thresholds
LARGE_FILE_LINES = 500
BUNDLE_WARN_BYTES = 10 * 1024 * 1024


# ── Models ───────────────────────────────────────────────────────────────────


class CheckStatus(str, Enum):
    PASSED = "passed"
    FAILED = "failed"


@dataclass(frozen=True)
class CheckResult:
    """Result of a single executed check."""

    name: str
    status: CheckStatus
    duration_ms: int
    critical: bool
    error: str | None = None
    warnings: tuple[str, ...] = ()

    @property
    def passed(self) -> bool:
        return self.status == CheckStatus.PASSED

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "status": self.status.value,
            "duration": self.duration_ms,
            "critical": self.critical,
            "error": self.error,
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class CheckContext:
    """What a check runner needs: the checked-out tree and a time budget."""

    root: Path
    timeout_sec: int = 1200
    pr_number: int | None = None


CheckRunner = Callable[[CheckContext], list[str]]


@dataclass(frozen=True)
class Check:
    name: str
    critical: bool
    run: CheckRunner = field(compare=False)


# ── External command checks ──────────────────────────────────────────────────


def command_check(name: str, command: str) -> CheckRunner:
    """A check that passes iff ``command`` exits 0."""

    def _run(ctx: CheckContext) -> list[str]:
        result = run_command(command, ctx.root, ctx.timeout_sec)
        result.raise_for_status(name)
        return []

    return _run


def audit_check(name: str, command: str) -> CheckRunner:
    """Dependency audit: exit code 1 means vulnerabilities were reported."""

    def _run(ctx: CheckContext) -> list[str]:
        result = run_command(command, ctx.root, ctx.timeout_sec)
        if result.exit_code == 1:
            raise ToolExecutionError(name, "Security vulnerabilities found in dependencies", 1)
        result.raise_for_status(name)
        return []

    return _run


_STYLISH_FINDING = re.compile(r"^\s*\d+:\d+\s+(error|warning)\b", re.MULTILINE)
_COMPACT_FINDING = re.compile(r"line \d+, col \d+, (Error|Warning) - ", re.MULTILINE)
_SUMMARY = re.compile(r"\((\d+) errors?, (\d+) warnings?\)")


@dataclass(frozen=True)
class LintCounts:
    errors: int
    warnings: int


def classify_lint_output(output: str) -> LintCounts:
    """Count error- and warning-severity findings in ESLint-style output."""
    summary = _SUMMARY.search(output)
    if summary:
        return LintCounts(errors=int(summary.group(1)), warnings=int(summary.group(2)))
    severities = [m.lower() for m in _STYLISH_FINDING.findall(output)]
    severities += [m.lower() for m in _COMPACT_FINDING.findall(output)]
    return LintCounts(
        errors=severities.count("error"),
        warnings=severities.count("warning"),
    )


def lint_check(name: str, command: str) -> CheckRunner:
    """Lint passes on exit 0, or on a non-zero exit that only reported warnings."""

    def _run(ctx: CheckContext) -> list[str]:
        result = run_command(command, ctx.root, ctx.timeout_sec)
        counts = classify_lint_output(result.output)
        if result.ok:
            return [f"{counts.warnings} lint warning(s)"] if counts.warnings else []
        if counts.errors == 0 and counts.warnings > 0:
            logger.warning("%s completed with %d warning(s)", name, counts.warnings)
            return [f"Linting completed with {counts.warnings} warning(s)"]
        if counts.errors:
            raise ToolExecutionError(name, f"{counts.errors} lint error(s)", result.exit_code)
        result.raise_for_status(name)
        return []

    return _run


# ── In-process scans ─────────────────────────────────────────────────────────


def run_code_quality(ctx: CheckContext) -> list[str]:
    """Warn about oversized TypeScript files under src/."""
    warnings = []
    for path in iter_files(ctx.root / "src", suffixes=(".ts", ".tsx")):
        lines = path.read_text(encoding="utf-8", errors="replace").count("\n") + 1
        if lines > LARGE_FILE_LINES:
            warnings.append(f"Large file: {path.relative_to(ctx.root).as_posix()} ({lines} lines)")
    return warnings


def run_bundle_size(ctx: CheckContext) -> list[str]:
    """Measure the build output directory produced by the build check."""
    dist = ctx.root / "dist"
    if not dist.is_dir():
        return []
    total = sum(p.stat().st_size for p in dist.rglob("*") if p.is_file())
    logger.info("Bundle size: %.2f MB", total / 1024 / 1024)
    if total > BUNDLE_WARN_BYTES:
        return [f"Bundle size is {total / 1024 / 1024:.2f} MB, consider optimization"]
    return []


_SECRET_PATTERNS = (
    re.compile(r"api[_-]?key[_-]?=\s*['\"][^'\"]+['\"]", re.IGNORECASE),
    re.compile(r"secret[_-]?key[_-]?=\s*['\"][^'\"]+['\"]", re.IGNORECASE),
    re.compile(r"password[_-]?=\s*['\"][^'\"]+['\"]", re.IGNORECASE),
    re.compile(r"token[_-]?=\s*['\"][^'\"]+['\"]", re.IGNORECASE),
)


def run_security_scan(ctx: CheckContext) -> list[str]:
    """Flag likely hard-coded credentials anywhere in the tree."""
    warnings = []
    for path in iter_files(ctx.root, suffixes=(".ts", ".tsx", ".js")):
        content = path.read_text(encoding="utf-8", errors="replace")
        if any(p.search(content) for p in _SECRET_PATTERNS):
            warnings.append(f"Potential hardcoded secret in {path.relative_to(ctx.root).as_posix()}")
    return warnings


_IMG_TAG = re.compile(r"<img[^>]*>")
_INPUT_TAG = re.compile(r"<input[^>]*>")


def run_accessibility(ctx: CheckContext) -> list[str]:
    """Images without alt text and inputs without a label hook."""
    warnings = []
    for path in iter_files(ctx.root / "src", suffixes=(".tsx",)):
        content = path.read_text(encoding="utf-8", errors="replace")
        rel = path.relative_to(ctx.root).as_posix()
        for tag in _IMG_TAG.findall(content):
            if "alt=" not in tag:
                warnings.append(f"Missing alt attribute in {rel}")
        for tag in _INPUT_TAG.findall(content):
            if "aria-label" not in tag and "id=" not in tag:
                warnings.append(f"Input without label in {rel}")
    return warnings


# Dispatcher: kind -> factory(name, command) -> runner
CHECK_KINDS: dict[str, Callable[[str, str], CheckRunner]] = {
    "command": command_check,
    "audit": audit_check,
    "lint": lint_check,
    "code-quality": lambda name, command: run_code_quality,
    "bundle-size": lambda name, command: run_bundle_size,
    "security-scan": lambda name, command: run_security_scan,
    "accessibility": lambda name, command: run_accessibility,
}

# Kinds that shell out and therefore need a command
COMMAND_KINDS = frozenset({"command", "audit", "lint"})


def build_check(name: str, kind: str, critical: bool = False, command: str = "") -> Check:
    factory = CHECK_KINDS.get(kind)
    if factory is None:
        raise ValueError(f"Unknown check kind: {kind}")
    if kind in COMMAND_KINDS and not command.strip():
        raise ValueError(f"Check '{name}' of kind '{kind}' needs a command")
    return Check(name=name, critical=critical, run=factory(name, command))
