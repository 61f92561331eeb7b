"""Subprocess execution: exit codes are data, not exceptions.

Callers classify a CommandResult themselves and raise ToolExecutionError
only where a non-zero exit actually means failure for them.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


class ToolExecutionError(Exception):
    """Raised when an external tool reports failure."""

    def __init__(self, tool: str, detail: str, exit_code: int | None = None) -> None:
        self.tool = tool
        self.detail = detail
        self.exit_code = exit_code
        super().__init__(f"{tool} failed: {detail}")


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a single external command."""

    exit_code: int
    stdout: str
    stderr: str
    duration_ms: int

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    @property
    def output(self) -> str:
        """stdout and stderr combined, for tools that split findings across both."""
        if self.stdout and self.stderr:
            return f"{self.stdout}\n{self.stderr}"
        return self.stdout or self.stderr

    def raise_for_status(self, tool: str) -> None:
        if self.ok:
            return
        detail = (self.stderr or self.stdout).strip().splitlines()
        summary = detail[-1] if detail else f"exit code {self.exit_code}"
        raise ToolExecutionError(tool, summary, self.exit_code)


def split_command(command: str | list[str]) -> list[str]:
    if isinstance(command, list):
        return command
    return shlex.split(command)


def run_command(
    command: str | list[str],
    cwd: Path | str,
    timeout_sec: int = 1200,
    env: dict[str, str] | None = None,
) -> CommandResult:
    """Run ``command`` without a shell; failures to launch come back as exit code -1."""
    t0 = time.perf_counter()
    try:
        cmd = split_command(command)
        result = subprocess.run(
            cmd,
            cwd=str(cwd),
            capture_output=True,
            text=True,
            timeout=timeout_sec,
            env=env,
            encoding="utf-8",
            errors="replace",
        )
        duration_ms = int((time.perf_counter() - t0) * 1000)
        return CommandResult(
            exit_code=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
            duration_ms=duration_ms,
        )
    except ValueError as e:
        logger.warning("Could not parse command %r: %s", command, e)
        return CommandResult(
            exit_code=-1,
            stdout="",
            stderr=f"Could not parse command: {e}",
            duration_ms=0,
        )
    except subprocess.TimeoutExpired:
        duration_ms = int((time.perf_counter() - t0) * 1000)
        logger.warning("Command timed out after %ss: %s", timeout_sec, " ".join(cmd))
        return CommandResult(
            exit_code=-1,
            stdout="",
            stderr=f"Command timed out after {timeout_sec}s",
            duration_ms=duration_ms,
        )
    except FileNotFoundError as e:
        duration_ms = int((time.perf_counter() - t0) * 1000)
        return CommandResult(
            exit_code=-1,
            stdout="",
            stderr=f"Command not found: {e}",
            duration_ms=duration_ms,
        )
    except OSError as e:
        duration_ms = int((time.perf_counter() - t0) * 1000)
        return CommandResult(
            exit_code=-1,
            stdout="",
            stderr=f"Error: {type(e).__name__}: {e}",
            duration_ms=duration_ms,
        )
