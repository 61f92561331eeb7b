"""Analyzer building blocks: Suggestion model, Scanner interface, file walking."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from pathlib import Path

logger = logging.getLogger(__name__)

SOURCE_SUFFIXES = (".ts", ".tsx", ".js", ".jsx")
SKIP_DIRS = frozenset({"node_modules", ".git", "dist", "build"})


class SuggestionType(str, Enum):
    REFACTOR = "refactor"
    IMPROVEMENT = "improvement"
    CLEANUP = "cleanup"
    CONSISTENCY = "consistency"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class Suggestion:
    """One heuristic finding. ``file`` and ``line`` are None for project-level findings."""

    type: SuggestionType
    message: str
    severity: Severity
    remediation: str
    file: str | None = None
    line: int | None = None

    @property
    def location(self) -> str:
        if self.file is None:
            return "project"
        if self.line is None:
            return self.file
        return f"{self.file}:{self.line}"


@dataclass(frozen=True)
class SourceFile:
    path: str
    content: str = field(repr=False)

    @cached_property
    def lines(self) -> list[str]:
        return self.content.split("\n")


class Scanner(ABC):
    """A single heuristic: source files in, suggestions out.

    Scanners hold no state between calls, so they can run in any order
    and a parser-backed implementation can replace any of them.
    """

    name: str = "scanner"

    @abstractmethod
    def scan(self, files: Sequence[SourceFile]) -> list[Suggestion]: ...


class FileScanner(Scanner):
    """Scanner whose findings depend on one file at a time."""

    def scan(self, files: Sequence[SourceFile]) -> list[Suggestion]:
        suggestions: list[Suggestion] = []
        for source in files:
            if self.accepts(source.path):
                suggestions.extend(self.scan_file(source))
        return suggestions

    def accepts(self, path: str) -> bool:
        return True

    @abstractmethod
    def scan_file(self, source: SourceFile) -> list[Suggestion]: ...


def iter_files(
    root: Path,
    suffixes: Iterable[str] = SOURCE_SUFFIXES,
    skip_dirs: Iterable[str] = SKIP_DIRS,
) -> Iterator[Path]:
    """Walk ``root`` depth-first in name order, yielding matching files."""
    suffixes = tuple(suffixes)
    skip = frozenset(skip_dirs)
    if not root.is_dir():
        return
    for entry in sorted(root.iterdir()):
        if entry.is_dir():
            if entry.name not in skip:
                yield from iter_files(entry, suffixes, skip)
        elif entry.name.endswith(suffixes):
            yield entry


def collect_source_files(root: Path | str, subdir: str = "src") -> list[SourceFile]:
    """Load every source file under ``<root>/<subdir>``."""
    base = Path(root) / subdir
    files = []
    for path in iter_files(base):
        try:
            content = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning("Skipping unreadable file %s: %s", path, e)
            continue
        files.append(SourceFile(path=path.as_posix(), content=content))
    return files
