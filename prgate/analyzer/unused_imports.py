"""Unused-import findings, delegated to the project's own linter.

The linter runs once over the tree with JSON output; any invocation or
parse failure is logged and yields no suggestions.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from prgate.workspace.process import run_command

from .base import Scanner, Severity, SourceFile, Suggestion, SuggestionType

logger = logging.getLogger(__name__)

UNUSED_RULES = frozenset({"no-unused-vars", "@typescript-eslint/no-unused-vars"})
UNUSED_MARKER = "is defined but never used"

# ESLint: 0 = clean, 1 = lint errors reported, 2 = crash / bad config
_LINT_FINDINGS_EXIT = 1


def count_unused(file_result: dict[str, Any]) -> int:
    return sum(
        1
        for msg in file_result.get("messages", [])
        if msg.get("ruleId") in UNUSED_RULES and UNUSED_MARKER in msg.get("message", "")
    )


class UnusedImportScanner(Scanner):
    name = "unused-imports"

    def __init__(self, root: Path | str, command: str, timeout_sec: int = 600) -> None:
        self.root = Path(root)
        self.command = command
        self.timeout_sec = timeout_sec

    def scan(self, files: Sequence[SourceFile]) -> list[Suggestion]:
        result = run_command(self.command, self.root, self.timeout_sec)
        if result.exit_code not in (0, _LINT_FINDINGS_EXIT):
            logger.warning("Lint check failed (exit %d): %s", result.exit_code, result.stderr.strip()[:200])
            return []
        try:
            report = json.loads(result.stdout)
        except ValueError as e:
            logger.warning("Lint output was not JSON: %s", e)
            return []
        if not isinstance(report, list):
            logger.warning("Lint output was not a list of file results")
            return []

        suggestions = []
        for file_result in report:
            unused = count_unused(file_result)
            if unused:
                suggestions.append(Suggestion(
                    type=SuggestionType.CLEANUP,
                    file=file_result.get("filePath"),
                    message=f"Found {unused} unused import(s).",
                    severity=Severity.LOW,
                    remediation="Remove unused imports to clean up the code.",
                ))
        return suggestions
