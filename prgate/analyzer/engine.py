"""Static analyzer: runs every scanner over one source tree.

Scanners are independent: one raising (missing tool, unreadable input)
is logged and the rest still run. Output order is scanner order.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .base import Scanner, Suggestion, collect_source_files
from .components import ComponentComplexityScanner
from .consistency import ConsistencyScanner
from .duplicates import DuplicateBlockScanner
from .long_functions import LongFunctionScanner
from .type_safety import TypeSafetyScanner
from .unused_imports import UnusedImportScanner

logger = logging.getLogger(__name__)


def default_scanners(root: Path | str, lint_json_command: str, timeout_sec: int = 600) -> list[Scanner]:
    scanners: list[Scanner] = [
        LongFunctionScanner(),
        DuplicateBlockScanner(),
        ComponentComplexityScanner(),
        TypeSafetyScanner(),
    ]
    if lint_json_command:
        scanners.append(UnusedImportScanner(root, lint_json_command, timeout_sec))
    scanners.append(ConsistencyScanner())
    return scanners


class StaticAnalyzer:
    def __init__(self, scanners: list[Scanner], source_dir: str = "src") -> None:
        self.scanners = scanners
        self.source_dir = source_dir

    def analyze(self, root: Path | str) -> list[Suggestion]:
        files = collect_source_files(root, self.source_dir)
        logger.info("Analyzing %d source files under %s", len(files), Path(root) / self.source_dir)

        suggestions: list[Suggestion] = []
        for scanner in self.scanners:
            try:
                found = scanner.scan(files)
            except Exception:
                logger.exception("Scanner %s failed, skipping", scanner.name)
                continue
            logger.info("Scanner %s: %d suggestion(s)", scanner.name, len(found))
            suggestions.extend(found)

        return suggestions
