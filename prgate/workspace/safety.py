"""Safety layer: guards on configured commands and pushed branches."""

from __future__ import annotations

import re
from collections.abc import Iterable

# ── Blocked patterns ─────────────────────────────────────────────────────────

# Destructive filesystem commands
_DESTRUCTIVE_FS = re.compile(
    r"(rm\s+-rf\s+[/\\]|rmdir\s+/s|del\s+/s|format\s+[a-z]:)", re.IGNORECASE
)

# Deploy commands (never part of a quality gate)
_DEPLOY = re.compile(
    r"(vercel\s+--prod|fly\s+deploy|docker\s+push|kubectl\s+apply|npm\s+publish)",
    re.IGNORECASE,
)

# Any git push from a check command
_GIT_PUSH = re.compile(r"git\s+push\b", re.IGNORECASE)

_ALWAYS_PROTECTED = ("main", "master")


class SafetyError(Exception):
    """Raised when a check command or a push target is not allowed."""


def validate_command(command: str) -> None:
    """Check a configured check command against the blocklist."""
    if _DESTRUCTIVE_FS.search(command):
        raise SafetyError(f"Blocked: destructive filesystem command in check: {command!r}")
    if _DEPLOY.search(command):
        raise SafetyError(f"Blocked: deployment command in check: {command!r}")
    if _GIT_PUSH.search(command):
        raise SafetyError(f"Blocked: checks may not push: {command!r}")


def validate_branch_for_push(branch: str, protected: Iterable[str] = ()) -> None:
    """Ensure we never push directly to the baseline or another protected branch."""
    normalized = branch.strip().lower()
    if not normalized:
        raise SafetyError("Blocked: refusing to push an empty branch name.")
    blocked = {b.strip().lower() for b in protected} | set(_ALWAYS_PROTECTED)
    if normalized in blocked:
        raise SafetyError(
            f"Blocked: cannot push to protected branch '{branch}'. "
            "Remediation changes go to their own branch."
        )
