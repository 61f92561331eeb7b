"""Remediation workflow: mechanical fixes proposed as a new pull request.

    BASELINE → BRANCH_CREATED → FIXES_APPLIED → DIFF_CHECKED
             → COMMITTED → PUSHED → REMOTE_UNIT_OPENED → BASELINE

The remediation branch is held through ``GitWorkspace.isolated`` so the
return to BASELINE happens on every path: success, empty diff, or a
failure at any transition.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from prgate.analyzer.base import Suggestion
from prgate.github.client import GitHubClient, RemoteAPIError
from prgate.github.models import PullRequest
from prgate.workspace.git import GitStateError, GitWorkspace
from prgate.workspace.process import run_command
from prgate.workspace.safety import SafetyError, validate_branch_for_push

from .description import render_description

logger = logging.getLogger(__name__)

COMMIT_TEMPLATE = "refactor: automated code improvements based on PR #{number}"
TITLE_TEMPLATE = "🔧 Automated Code Improvements (Based on PR #{number})"


class RemediationState(str, Enum):
    BASELINE = "baseline"
    BRANCH_CREATED = "branch_created"
    FIXES_APPLIED = "fixes_applied"
    DIFF_CHECKED = "diff_checked"
    COMMITTED = "committed"
    PUSHED = "pushed"
    REMOTE_UNIT_OPENED = "remote_unit_opened"


@dataclass(frozen=True)
class FixTool:
    """A best-effort auto-fix command and the note it contributes to the PR body."""

    name: str
    command: str
    note: str


@dataclass
class RemediationOutcome:
    pr_number: int
    branch: str = ""
    transitions: list[RemediationState] = field(default_factory=lambda: [RemediationState.BASELINE])
    applied_fixes: list[str] = field(default_factory=list)
    pr_url: str | None = None
    no_changes: bool = False
    error: str | None = None

    @property
    def final_state(self) -> RemediationState:
        return self.transitions[-1]

    @property
    def opened(self) -> bool:
        return RemediationState.REMOTE_UNIT_OPENED in self.transitions

    def advance(self, state: RemediationState) -> None:
        self.transitions.append(state)
        logger.debug("Remediation PR #%d → %s", self.pr_number, state.value)


def remediation_branch_name(pr_number: int, now: datetime | None = None) -> str:
    stamp = (now or datetime.now(timezone.utc)).strftime("%Y%m%d%H%M%S")
    return f"refactor/pr-{pr_number}-improvements-{stamp}"


class RemediationWorkflow:
    def __init__(
        self,
        workspace: GitWorkspace,
        client: GitHubClient,
        fix_tools: Sequence[FixTool],
        timeout_sec: int = 600,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.workspace = workspace
        self.client = client
        self.fix_tools = list(fix_tools)
        self.timeout_sec = timeout_sec
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def run(self, pr: PullRequest, suggestions: Sequence[Suggestion], start_point: str) -> RemediationOutcome:
        outcome = RemediationOutcome(
            pr_number=pr.number,
            branch=remediation_branch_name(pr.number, self._clock()),
        )
        logger.info(
            "Generating remediation for PR #%d with %d suggestions on %s",
            pr.number, len(suggestions), outcome.branch,
        )

        try:
            with self.workspace.isolated(outcome.branch, start_point=start_point):
                outcome.advance(RemediationState.BRANCH_CREATED)
                self._drive(pr, suggestions, outcome)
        except (GitStateError, SafetyError, RemoteAPIError) as e:
            outcome.error = str(e)
            logger.error(
                "Remediation for PR #%d stopped after %s: %s",
                pr.number, outcome.final_state.value, e,
            )

        self._confirm_baseline(outcome)
        return outcome

    def _drive(self, pr: PullRequest, suggestions: Sequence[Suggestion], outcome: RemediationOutcome) -> None:
        self._apply_fixes(outcome)
        outcome.advance(RemediationState.FIXES_APPLIED)

        if not self.workspace.has_changes():
            outcome.no_changes = True
            logger.info("No changes to commit after automatic fixes.")
            return
        outcome.advance(RemediationState.DIFF_CHECKED)

        self.workspace.add_all()
        self.workspace.commit(COMMIT_TEMPLATE.format(number=pr.number))
        outcome.advance(RemediationState.COMMITTED)

        validate_branch_for_push(outcome.branch, protected=(self.workspace.baseline, pr.head_ref))
        self.workspace.push(outcome.branch)
        outcome.advance(RemediationState.PUSHED)

        notes = [tool.note for tool in self.fix_tools if tool.name in outcome.applied_fixes]
        # a fork's branch lives in another repository and cannot be a base here
        base = self.workspace.baseline if pr.from_fork else pr.head_ref
        created = self.client.create_pull_request(
            title=TITLE_TEMPLATE.format(number=pr.number),
            head=outcome.branch,
            base=base,
            body=render_description(pr.number, suggestions, notes),
        )
        outcome.pr_url = created.html_url
        outcome.advance(RemediationState.REMOTE_UNIT_OPENED)
        logger.info("Created refactoring PR: %s", created.html_url)

    def _apply_fixes(self, outcome: RemediationOutcome) -> None:
        for tool in self.fix_tools:
            result = run_command(tool.command, self.workspace.root, self.timeout_sec)
            if result.ok:
                outcome.applied_fixes.append(tool.name)
                logger.info("Applied %s.", tool.name)
            else:
                logger.warning("%s failed, continuing... (%s)", tool.name, result.stderr.strip()[:200])

    def _confirm_baseline(self, outcome: RemediationOutcome) -> None:
        try:
            if self.workspace.current_branch != self.workspace.baseline:
                self.workspace.restore_baseline()
        except GitStateError as e:
            logger.critical("Working tree NOT restored to %s: %s", self.workspace.baseline, e)
            outcome.error = outcome.error or str(e)
            return
        outcome.advance(RemediationState.BASELINE)
