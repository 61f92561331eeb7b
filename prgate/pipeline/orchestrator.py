"""Per-unit driver: analyze → test → report → (maybe) analyze code + remediate.

Units are processed one at a time against the shared checkout. A failure
while processing one unit is logged and recorded; the next unit still runs.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence

from prgate.analyzer.engine import StaticAnalyzer
from prgate.github.client import GitHubClient, RemoteAPIError
from prgate.github.models import PullRequest
from prgate.harness.runner import TestHarness
from prgate.remediation.workflow import RemediationWorkflow
from prgate.workspace.git import GitStateError, GitWorkspace

from .comments import render_failure_comment, render_success_comment
from .models import AnalysisResult, PipelineOutcome, PipelineRun

logger = logging.getLogger(__name__)


class Orchestrator:
    def __init__(
        self,
        client: GitHubClient,
        workspace: GitWorkspace,
        harness: TestHarness,
        analyzer: StaticAnalyzer,
        remediation: RemediationWorkflow,
        enable_auto_testing: bool = True,
        enable_auto_refactoring: bool = True,
        min_files: int = 5,
        min_additions: int = 100,
    ) -> None:
        self.client = client
        self.workspace = workspace
        self.harness = harness
        self.analyzer = analyzer
        self.remediation = remediation
        self.enable_auto_testing = enable_auto_testing
        self.enable_auto_refactoring = enable_auto_refactoring
        self.min_files = min_files
        self.min_additions = min_additions

    # ── Steps ─────────────────────────────────────────────────────────────

    def analyze_changes(self, pr: PullRequest) -> AnalysisResult | None:
        try:
            files = self.client.list_pull_request_files(pr.number)
        except RemoteAPIError as e:
            logger.error("Error analyzing PR #%d changes: %s", pr.number, e)
            return None
        analysis = AnalysisResult.from_files(files)
        logger.info(
            "PR Analysis: %d files, +%d/-%d lines",
            analysis.total_files, analysis.additions, analysis.deletions,
        )
        if analysis.critical_files:
            logger.info("Critical files modified: %s", ", ".join(analysis.critical_files))
        return analysis

    def should_remediate(self, analysis: AnalysisResult | None) -> bool:
        if analysis is None:
            return False
        return analysis.total_files > self.min_files or analysis.additions > self.min_additions

    def post_report(self, pr: PullRequest, run: PipelineRun) -> None:
        if run.outcome == PipelineOutcome.PASSED:
            body = render_success_comment(run.analysis, run.check_results)
        else:
            body = render_failure_comment(run.analysis, run.errors)
        try:
            self.client.create_comment(pr.number, body)
            run.comment_posted = True
        except RemoteAPIError as e:
            logger.error("Could not comment on PR #%d: %s", pr.number, e)

    def remediate(self, pr: PullRequest, run: PipelineRun) -> None:
        logger.info("Triggering refactoring analysis for PR #%d", pr.number)
        try:
            local_ref = self.workspace.fetch_pull_request(pr.number)
            with self.workspace.isolated(local_ref):
                run.suggestions = self.analyzer.analyze(self.workspace.root)
        except GitStateError as e:
            logger.error("Refactoring analysis failed for PR #%d: %s", pr.number, e)
            return

        if not run.suggestions:
            logger.info("No refactoring suggestions found. Code quality looks good!")
            return

        logger.info("Found %d suggestions for improvement.", len(run.suggestions))
        run.remediation = self.remediation.run(pr, run.suggestions, start_point=local_ref)

    # ── Drivers ───────────────────────────────────────────────────────────

    def process(self, pr: PullRequest) -> PipelineRun:
        logger.info("Processing PR #%d: %s", pr.number, pr.title)
        run = PipelineRun(pr_number=pr.number)
        run.analysis = self.analyze_changes(pr)

        if not self.enable_auto_testing:
            run.outcome = PipelineOutcome.SKIPPED
            logger.info("Auto-testing disabled, PR #%d not tested", pr.number)
            return run

        result = self.harness.run(pr.number)
        run.check_results = list(result.results)
        run.errors = list(result.errors)
        run.outcome = PipelineOutcome.PASSED if result.passed else PipelineOutcome.FAILED
        logger.info("Tests %s for PR #%d", run.outcome.value, pr.number)

        self.post_report(pr, run)

        if (
            run.outcome == PipelineOutcome.PASSED
            and self.enable_auto_refactoring
            and self.should_remediate(run.analysis)
        ):
            self.remediate(pr, run)
        return run

    def process_all(
        self,
        prs: Sequence[PullRequest],
        stop_event: threading.Event | None = None,
    ) -> list[PipelineRun]:
        """Process units in order; stops between units once ``stop_event`` is set."""
        runs = []
        for pr in prs:
            if stop_event is not None and stop_event.is_set():
                logger.warning("Stop requested, %d unit(s) left for the next cycle", len(prs) - len(runs))
                break
            try:
                runs.append(self.process(pr))
            except Exception as e:
                logger.exception("Processing PR #%d failed", pr.number)
                runs.append(PipelineRun(
                    pr_number=pr.number,
                    outcome=PipelineOutcome.ERROR,
                    errors=[f"{type(e).__name__}: {e}"],
                ))
        return runs
