"""Test harness: ordered critical/advisory checks, JSON report."""

from .checks import Check, CheckContext, CheckResult, CheckStatus, build_check, classify_lint_output
from .registry import default_checks, load_checks, resolve_checks
from .report import ReportWriter, build_report
from .runner import HarnessResult, TestHarness
