"""Test harness: runs the ordered check list against a pull request's head.

Critical failures abort the run; advisory failures are recorded and the
run continues. The checkout is isolated: the baseline branch is restored
on every exit path, including a failed fetch or checkout.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any

from prgate.workspace.git import GitStateError, GitWorkspace
from prgate.workspace.process import ToolExecutionError

from .checks import Check, CheckContext, CheckResult, CheckStatus
from .report import ReportWriter

logger = logging.getLogger(__name__)


@dataclass
class HarnessResult:
    """Everything one harness invocation produced."""

    pr_number: int
    declared: int
    results: list[CheckResult] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    setup_error: str | None = None
    restore_error: str | None = None  # checks ran but the baseline could not be restored
    aborted_by: str | None = None  # name of the critical check that stopped the run

    @property
    def passed(self) -> bool:
        if self.setup_error is not None or self.restore_error is not None:
            return False
        return not any(r.critical and not r.passed for r in self.results)

    def summary(self) -> dict[str, Any]:
        passed = sum(1 for r in self.results if r.passed)
        failed = len(self.results) - passed
        skipped = self.declared - len(self.results)
        total = passed + failed + skipped
        pass_rate = round(passed / total * 100, 1) if total else 0.0
        return {
            "total": total,
            "passed": passed,
            "failed": failed,
            "skipped": skipped,
            "passRate": pass_rate,
        }


class TestHarness:
    """Executes checks in declaration order on an isolated pull request ref."""

    __test__ = False  # not a pytest class

    def __init__(
        self,
        workspace: GitWorkspace,
        checks: list[Check],
        reporter: ReportWriter | None = None,
        timeout_sec: int = 1200,
    ) -> None:
        self.workspace = workspace
        self.checks = checks
        self.reporter = reporter
        self.timeout_sec = timeout_sec

    def run(self, pr_number: int) -> HarnessResult:
        outcome = HarnessResult(pr_number=pr_number, declared=len(self.checks))
        logger.info("Running %d checks for PR #%d", len(self.checks), pr_number)

        try:
            local_ref = self.workspace.fetch_pull_request(pr_number)
            with self.workspace.isolated(local_ref):
                ctx = CheckContext(
                    root=self.workspace.root,
                    timeout_sec=self.timeout_sec,
                    pr_number=pr_number,
                )
                self._execute(ctx, outcome)
        except GitStateError as e:
            if outcome.results:
                outcome.restore_error = str(e)
            else:
                outcome.setup_error = str(e)
            outcome.errors.append(str(e))
            logger.error("PR #%d: %s", pr_number, e)
            self._ensure_baseline()

        if outcome.passed:
            logger.info("All critical checks passed for PR #%d", pr_number)
        else:
            logger.warning("Checks failed for PR #%d: %s", pr_number, "; ".join(outcome.errors))

        if self.reporter is not None:
            self.reporter.write(outcome)
        return outcome

    def _execute(self, ctx: CheckContext, outcome: HarnessResult) -> None:
        for check in self.checks:
            result = self._run_check(check, ctx)
            outcome.results.append(result)
            if result.passed:
                continue
            outcome.errors.append(f"{check.name}: {result.error}")
            if check.critical:
                outcome.aborted_by = check.name
                logger.error("Critical check failed, stopping: %s", check.name)
                break

    def _run_check(self, check: Check, ctx: CheckContext) -> CheckResult:
        logger.info("Running %s...", check.name)
        t0 = time.perf_counter()
        status = CheckStatus.PASSED
        error: str | None = None
        warnings: list[str] = []
        try:
            warnings = check.run(ctx)
        except ToolExecutionError as e:
            status = CheckStatus.FAILED
            error = e.detail
        except OSError as e:
            status = CheckStatus.FAILED
            error = f"{type(e).__name__}: {e}"
        duration_ms = int((time.perf_counter() - t0) * 1000)

        for w in warnings:
            logger.warning("  - %s", w)
        if status == CheckStatus.PASSED:
            logger.info("%s passed (%dms)", check.name, duration_ms)
        else:
            logger.error("%s failed: %s", check.name, error)

        return CheckResult(
            name=check.name,
            status=status,
            duration_ms=duration_ms,
            critical=check.critical,
            error=error,
            warnings=tuple(warnings),
        )

    def _ensure_baseline(self) -> None:
        # fetch happens before the isolated block, so a fetch failure may
        # never reach its cleanup
        try:
            self.workspace.restore_baseline()
        except GitStateError:
            logger.exception("Could not restore baseline branch %s", self.workspace.baseline)
