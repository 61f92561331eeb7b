"""UI component complexity: hook count and file length."""

from __future__ import annotations

import re

from .base import FileScanner, Severity, SourceFile, Suggestion, SuggestionType

_HOOK_CALL = re.compile(r"use[A-Z]\w*")
_ELEMENT_TAG = re.compile(r"<[A-Z]\w*")

DEFAULT_MAX_HOOKS = 8
DEFAULT_MAX_LINES = 300


class ComponentComplexityScanner(FileScanner):
    name = "component-complexity"

    def __init__(self, max_hooks: int = DEFAULT_MAX_HOOKS, max_lines: int = DEFAULT_MAX_LINES) -> None:
        self.max_hooks = max_hooks
        self.max_lines = max_lines

    def accepts(self, path: str) -> bool:
        return "/components/" in path and path.endswith(".tsx")

    def scan_file(self, source: SourceFile) -> list[Suggestion]:
        hooks = len(_HOOK_CALL.findall(source.content))
        elements = len(_ELEMENT_TAG.findall(source.content))
        line_count = len(source.lines)
        suggestions = []

        if hooks > self.max_hooks:
            suggestions.append(Suggestion(
                type=SuggestionType.REFACTOR,
                file=source.path,
                message=(
                    f"Component uses {hooks} hooks across {elements} elements. "
                    "Consider using custom hooks or breaking into smaller components."
                ),
                severity=Severity.MEDIUM,
                remediation="Extract logic into custom hooks or split component.",
            ))

        if line_count > self.max_lines:
            suggestions.append(Suggestion(
                type=SuggestionType.REFACTOR,
                file=source.path,
                message=f"Component is {line_count} lines long. Consider breaking into smaller components.",
                severity=Severity.HIGH,
                remediation="Split this component into smaller, more focused components.",
            ))

        return suggestions
