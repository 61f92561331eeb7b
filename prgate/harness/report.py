"""JSON report artifact: one file per harness run, overwritten each time."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

from prgate.checkpoint import FilesystemError, atomic_write_text, format_timestamp

if TYPE_CHECKING:
    from .runner import HarnessResult

logger = logging.getLogger(__name__)


def build_report(result: HarnessResult, now: datetime | None = None) -> dict[str, Any]:
    return {
        "timestamp": format_timestamp(now or datetime.now(timezone.utc)),
        "prNumber": result.pr_number,
        "summary": result.summary(),
        "tests": [r.to_dict() for r in result.results],
        "errors": list(result.errors),
    }


class ReportWriter:
    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def write(self, result: HarnessResult) -> bool:
        """Persist the report. I/O failures are logged, never raised."""
        payload = json.dumps(build_report(result), indent=2)
        try:
            atomic_write_text(self.path, payload + "\n")
        except FilesystemError as e:
            logger.error("Report not written: %s", e)
            return False
        logger.info("Detailed report saved to: %s", self.path)
        return True
