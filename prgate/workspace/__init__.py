"""Local working tree: subprocess runner, git wrapper, safety guards."""

from .git import GitStateError, GitWorkspace
from .process import CommandResult, ToolExecutionError, run_command
from .safety import SafetyError, validate_branch_for_push, validate_command
