"""Long-function heuristic: brace-depth tracking from a declaration line."""

from __future__ import annotations

from .base import FileScanner, Severity, SourceFile, Suggestion, SuggestionType

DEFAULT_MAX_LINES = 50


def looks_like_declaration(line: str) -> bool:
    """Keyword / arrow-assignment match; not a syntactic check."""
    if "function " in line:
        return True
    return "const " in line and " = " in line and "=>" in line


class LongFunctionScanner(FileScanner):
    name = "long-functions"

    def __init__(self, max_lines: int = DEFAULT_MAX_LINES) -> None:
        self.max_lines = max_lines

    def scan_file(self, source: SourceFile) -> list[Suggestion]:
        suggestions = []
        depth = 0
        start: int | None = None

        for i, raw in enumerate(source.lines):
            line = raw.strip()

            if looks_like_declaration(line) and depth == 0:
                start = i

            depth += line.count("{") - line.count("}")

            if start is not None and depth == 0 and i > start:
                span = i - start
                if span > self.max_lines:
                    suggestions.append(Suggestion(
                        type=SuggestionType.REFACTOR,
                        file=source.path,
                        line=start + 1,
                        message=f"Function is {span} lines long. Consider breaking it into smaller functions.",
                        severity=Severity.MEDIUM,
                        remediation="Break this function into smaller, more focused functions.",
                    ))
                start = None

        return suggestions
