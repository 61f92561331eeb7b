"""Remediation: branch-isolated auto-fix workflow and PR description."""

from .description import render_description
from .workflow import (
    FixTool,
    RemediationOutcome,
    RemediationState,
    RemediationWorkflow,
    remediation_branch_name,
)
