"""Pull request body for a remediation unit."""

from __future__ import annotations

from collections.abc import Sequence

from prgate.analyzer.base import Severity, Suggestion

DEFAULT_FIX_NOTES = ("ESLint automatic fixes", "Prettier code formatting")

_SECTIONS = (
    (Severity.HIGH, "🔴 High Priority Issues"),
    (Severity.MEDIUM, "🟡 Medium Priority Issues"),
    (Severity.LOW, "🟢 Low Priority Issues"),
)


def render_description(
    pr_number: int,
    suggestions: Sequence[Suggestion],
    fix_notes: Sequence[str] = DEFAULT_FIX_NOTES,
) -> str:
    """Group suggestions by severity; empty severities get no section."""
    parts = [
        "## 🔧 Automated Code Improvements\n\n",
        f"This PR contains automated code improvements based on analysis of PR #{pr_number}.\n\n",
    ]

    for severity, heading in _SECTIONS:
        group = [s for s in suggestions if s.severity == severity]
        if not group:
            continue
        parts.append(f"### {heading} ({len(group)})\n")
        for s in group:
            parts.append(f"- **{s.location}**: {s.message}\n")
        parts.append("\n")

    parts.append("### 🤖 Automatic Fixes Applied\n")
    for note in fix_notes:
        parts.append(f"- {note}\n")
    parts.append("\n")

    parts.append("### 📋 Manual Review Needed\n")
    parts.append("Please review the suggestions above and consider implementing the recommended changes.\n\n")
    parts.append("---\n*This PR was automatically generated by the code quality monitoring system.*")
    return "".join(parts)
