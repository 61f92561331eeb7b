"""Type-safety heuristic: `any` annotations and bare parameter lists, per file."""

from __future__ import annotations

import re

from .base import FileScanner, Severity, SourceFile, Suggestion, SuggestionType

_ANY_ANNOTATION = re.compile(r":\s*any\b")
_UNTYPED_PARAMS = re.compile(r"\(\s*\w+\s*\)")


class TypeSafetyScanner(FileScanner):
    name = "type-safety"

    def accepts(self, path: str) -> bool:
        return path.endswith((".ts", ".tsx"))

    def scan_file(self, source: SourceFile) -> list[Suggestion]:
        suggestions = []

        any_count = len(_ANY_ANNOTATION.findall(source.content))
        if any_count:
            suggestions.append(Suggestion(
                type=SuggestionType.IMPROVEMENT,
                file=source.path,
                message=f"Found {any_count} usage(s) of 'any' type. Consider using specific types.",
                severity=Severity.LOW,
                remediation="Replace any types with specific type definitions.",
            ))

        untyped = len(_UNTYPED_PARAMS.findall(source.content))
        if untyped:
            suggestions.append(Suggestion(
                type=SuggestionType.IMPROVEMENT,
                file=source.path,
                message=f"Found {untyped} function parameter list(s) without explicit types.",
                severity=Severity.LOW,
                remediation="Add explicit types to function parameters.",
            ))

        return suggestions
