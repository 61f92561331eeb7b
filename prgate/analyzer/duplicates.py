"""Duplicate-block heuristic: exact 5-line windows seen more than once."""

from __future__ import annotations

from collections.abc import Sequence

from .base import Scanner, Severity, SourceFile, Suggestion, SuggestionType

WINDOW = 5
MIN_BLOCK_CHARS = 50


class DuplicateBlockScanner(Scanner):
    """First occurrence of a block is remembered; every later one is reported once."""

    name = "duplicate-blocks"

    def __init__(self, window: int = WINDOW, min_chars: int = MIN_BLOCK_CHARS) -> None:
        self.window = window
        self.min_chars = min_chars

    def scan(self, files: Sequence[SourceFile]) -> list[Suggestion]:
        first_seen: dict[str, tuple[str, int]] = {}
        suggestions = []

        for source in files:
            lines = source.lines
            for i in range(len(lines) - self.window + 1):
                block = "\n".join(lines[i:i + self.window]).strip()
                if len(block) <= self.min_chars:
                    continue
                origin = first_seen.get(block)
                if origin is None:
                    first_seen[block] = (source.path, i + 1)
                    continue
                suggestions.append(Suggestion(
                    type=SuggestionType.REFACTOR,
                    file=source.path,
                    line=i + 1,
                    message=f"Duplicate code block found (also in {origin[0]}:{origin[1]})",
                    severity=Severity.MEDIUM,
                    remediation="Extract this code into a reusable function or component.",
                ))

        return suggestions
