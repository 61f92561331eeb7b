"""Pull request comment bodies for pass/fail reports."""

from __future__ import annotations

from collections.abc import Sequence

from prgate.harness.checks import CheckResult

from .models import AnalysisResult


def _count(analysis: AnalysisResult | None, attr: str) -> str:
    return str(getattr(analysis, attr)) if analysis is not None else "N/A"


def _critical_section(analysis: AnalysisResult | None) -> str:
    if analysis is None or not analysis.critical_files:
        return ""
    lines = "".join(f"- `{path}`\n" for path in analysis.critical_files)
    return f"**Critical files modified:**\n{lines}\n"


def _warning_section(results: Sequence[CheckResult]) -> str:
    flagged = [r for r in results if r.warnings]
    if not flagged:
        return ""
    lines = "".join(f"- {r.name}: {w}\n" for r in flagged for w in r.warnings)
    return f"**Warnings:**\n{lines}\n"


def render_success_comment(analysis: AnalysisResult | None, results: Sequence[CheckResult] = ()) -> str:
    return (
        "✅ **Automated Testing Complete**\n\n"
        "All tests passed successfully!\n\n"
        "**Analysis:**\n"
        f"- Files changed: {_count(analysis, 'total_files')}\n"
        f"- Lines added: {_count(analysis, 'additions')}\n"
        f"- Lines deleted: {_count(analysis, 'deletions')}\n\n"
        f"{_critical_section(analysis)}"
        f"{_warning_section(results)}"
        "Build, linting, and type checking all completed successfully."
    )


def render_failure_comment(analysis: AnalysisResult | None, errors: Sequence[str]) -> str:
    issues = "\n".join(f"- {e}" for e in errors) or "- Unknown failure"
    return (
        "❌ **Automated Testing Failed**\n\n"
        "The following issues were found:\n\n"
        f"{issues}\n\n"
        f"{_critical_section(analysis)}"
        "Please fix these issues before merging."
    )
