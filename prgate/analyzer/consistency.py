"""Project-wide style consistency: quotes, semicolons, indentation.

All three pairs are counted, but only quoting is reported: semicolon and
indentation counts are too noisy on JSX and multi-line expressions to
act on, so they are only logged.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from .base import Scanner, Severity, SourceFile, Suggestion, SuggestionType

logger = logging.getLogger(__name__)


@dataclass
class StyleTally:
    """Counts for one pair of competing conventions."""

    topic: str
    first: str
    second: str
    first_count: int = 0
    second_count: int = 0

    @property
    def mixed(self) -> bool:
        return self.first_count > 0 and self.second_count > 0

    @property
    def majority(self) -> str:
        return self.first if self.first_count > self.second_count else self.second


def tally(files: Sequence[SourceFile]) -> list[StyleTally]:
    quotes = StyleTally("quote", "single", "double")
    semicolons = StyleTally("statement termination", "semicolon-terminated", "semicolon-free")
    indentation = StyleTally("indentation", "space", "tab")

    for source in files:
        quotes.first_count += source.content.count("'")
        quotes.second_count += source.content.count('"')

        for line in source.lines:
            stripped = line.strip()
            if stripped.endswith(";"):
                semicolons.first_count += 1
            elif stripped and not stripped.endswith(("{", "}")):
                semicolons.second_count += 1

            if line.startswith("\t"):
                indentation.second_count += 1
            elif line.startswith("  "):
                indentation.first_count += 1

    return [quotes, semicolons, indentation]


class ConsistencyScanner(Scanner):
    """Emits at most one project-level suggestion: no file, no line."""

    name = "consistency"
    reported_topic = "quote"

    def scan(self, files: Sequence[SourceFile]) -> list[Suggestion]:
        suggestions = []
        for t in tally(files):
            if not t.mixed:
                continue
            if t.topic != self.reported_topic:
                logger.debug(
                    "Mixed %s styles (%s: %d, %s: %d), not reported",
                    t.topic, t.first, t.first_count, t.second, t.second_count,
                )
                continue
            suggestions.append(Suggestion(
                type=SuggestionType.CONSISTENCY,
                message=(
                    f"Mixed {t.topic} styles found ({t.first}: {t.first_count}, "
                    f"{t.second}: {t.second_count}). Consider using {t.majority} quotes consistently."
                ),
                severity=Severity.LOW,
                remediation=f"Use {t.majority} quotes throughout the codebase.",
            ))
        return suggestions
