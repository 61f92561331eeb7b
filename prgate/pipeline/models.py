"""Per-unit pipeline records."""

from __future__ import annotations

import posixpath
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from prgate.analyzer.base import Suggestion
from prgate.harness.checks import CheckResult

if TYPE_CHECKING:
    from prgate.github.models import PullRequestFile
    from prgate.remediation.workflow import RemediationOutcome

# Substrings marking build, config, and schema-migration files
CRITICAL_MARKERS = ("package.json", "tsconfig", "vite.config", "supabase/migrations", "migrations/")
TEST_MARKERS = (".test.", ".spec.", "__tests__")


@dataclass(frozen=True)
class AnalysisResult:
    """Shape of a pull request, derived only from its changed-file list."""

    total_files: int
    additions: int
    deletions: int
    file_types: dict[str, int] = field(default_factory=dict, hash=False)
    critical_files: tuple[str, ...] = ()
    test_files: tuple[str, ...] = ()

    @classmethod
    def from_files(cls, files: Iterable[PullRequestFile]) -> AnalysisResult:
        files = list(files)
        file_types: dict[str, int] = {}
        critical: list[str] = []
        tests: list[str] = []
        for f in files:
            ext = posixpath.splitext(f.filename)[1]
            file_types[ext] = file_types.get(ext, 0) + 1
            if any(marker in f.filename for marker in CRITICAL_MARKERS):
                critical.append(f.filename)
            if any(marker in f.filename for marker in TEST_MARKERS):
                tests.append(f.filename)
        return cls(
            total_files=len(files),
            additions=sum(f.additions for f in files),
            deletions=sum(f.deletions for f in files),
            file_types=file_types,
            critical_files=tuple(critical),
            test_files=tuple(tests),
        )


class PipelineOutcome(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"  # testing disabled
    ERROR = "error"  # processing itself broke


@dataclass
class PipelineRun:
    """Scoped to one unit: discarded once the report is posted."""

    pr_number: int
    outcome: PipelineOutcome = PipelineOutcome.ERROR
    analysis: AnalysisResult | None = None
    check_results: list[CheckResult] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    suggestions: list[Suggestion] = field(default_factory=list)
    remediation: RemediationOutcome | None = None
    comment_posted: bool = False
