from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Central configuration loaded from environment / .env file."""

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "PRGATE_",
        "extra": "ignore",
    }

    # GitHub
    github_token: str = ""
    github_owner: str = ""
    github_repo: str = ""
    github_api_url: str = "https://api.github.com"
    github_timeout: float = 30.0

    # Local checkout the pipeline operates on
    repo_path: str = "."
    baseline_branch: str = "main"
    git_remote: str = "origin"
    git_timeout: int = 120

    # Schedule: seconds, "5m" style, or "*/5 * * * *"
    check_interval: str = "*/5 * * * *"

    # Feature toggles
    enable_auto_testing: bool = True
    enable_auto_refactoring: bool = True

    # Remediation predicate (either threshold triggers)
    refactor_min_files: int = 5
    refactor_min_additions: int = 100

    # Harness commands
    install_command: str = "npm install"
    build_command: str = "npm run build"
    typecheck_command: str = "npx tsc --noEmit"
    lint_command: str = "npm run lint"
    audit_command: str = "npm audit --audit-level=high"
    command_timeout: int = 1200  # 20 min per check
    checks_file: str = ""  # optional YAML check list

    # Remediation tooling
    lint_fix_command: str = "npx eslint src/ --fix"
    format_command: str = 'npx prettier --write "src/**/*.{ts,tsx,js,jsx}"'
    lint_json_command: str = 'npx eslint src/ --format json --rule "no-unused-vars: error"'

    # State + artifacts
    checkpoint_file: str = ".last-pr-check"
    checkpoint_lookback_hours: int = 24
    report_file: str = "test-report.json"
    log_file: str = "prgate.log"

    # Logging
    log_level: str = "INFO"

    # Notifications (no-ops unless toggled on and configured)
    notify_slack: bool = False
    notify_discord: bool = False
    notify_telegram: bool = False
    slack_webhook_url: str = ""
    discord_webhook_url: str = ""
    telegram_bot_token: str = ""
    telegram_chat_id: str = ""


settings = Settings()
