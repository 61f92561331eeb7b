"""Entry point for the PR quality gate: `prgate` console script."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from collections import deque
from datetime import timedelta
from pathlib import Path

from rich.console import Console
from rich.panel import Panel

from prgate.analyzer.engine import StaticAnalyzer, default_scanners
from prgate.checkpoint import CheckpointStore, format_timestamp
from prgate.config import Settings, settings
from prgate.detector import ChangeDetector
from prgate.github.client import GitHubClient
from prgate.harness.registry import resolve_checks
from prgate.harness.report import ReportWriter
from prgate.harness.runner import TestHarness
from prgate.notifications import NotificationManager
from prgate.pipeline.orchestrator import Orchestrator
from prgate.remediation.workflow import FixTool, RemediationWorkflow
from prgate.scheduler import MonitorDaemon, parse_schedule, serve
from prgate.workspace.git import GitWorkspace
from prgate.workspace.safety import SafetyError

console = Console()
logger = logging.getLogger("prgate")


def configure_logging(cfg: Settings) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if cfg.log_file:
        handlers.append(logging.FileHandler(cfg.log_file, encoding="utf-8"))
    logging.basicConfig(
        level=getattr(logging, cfg.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        handlers=handlers,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


def build_daemon(cfg: Settings) -> MonitorDaemon:
    """Wire every pipeline component from settings.

    Raises ValueError / SafetyError for configuration the daemon cannot run with.
    """
    if not cfg.github_owner or not cfg.github_repo:
        raise ValueError("PRGATE_GITHUB_OWNER and PRGATE_GITHUB_REPO must be set")
    interval = parse_schedule(cfg.check_interval)

    root = Path(cfg.repo_path).resolve()
    client = GitHubClient(
        owner=cfg.github_owner,
        repo=cfg.github_repo,
        token=cfg.github_token,
        base_url=cfg.github_api_url,
        timeout=cfg.github_timeout,
    )
    workspace = GitWorkspace(root, cfg.baseline_branch, cfg.git_remote, cfg.git_timeout)
    checkpoint = CheckpointStore(
        cfg.checkpoint_file,
        lookback=timedelta(hours=cfg.checkpoint_lookback_hours),
    )

    harness = TestHarness(
        workspace,
        resolve_checks(cfg),
        reporter=ReportWriter(cfg.report_file),
        timeout_sec=cfg.command_timeout,
    )
    analyzer = StaticAnalyzer(default_scanners(root, cfg.lint_json_command, cfg.command_timeout))
    fix_tools = [
        FixTool("ESLint fix", cfg.lint_fix_command, "ESLint automatic fixes"),
        FixTool("Prettier", cfg.format_command, "Prettier code formatting"),
    ]
    remediation = RemediationWorkflow(
        workspace, client, [t for t in fix_tools if t.command], timeout_sec=cfg.command_timeout,
    )
    orchestrator = Orchestrator(
        client=client,
        workspace=workspace,
        harness=harness,
        analyzer=analyzer,
        remediation=remediation,
        enable_auto_testing=cfg.enable_auto_testing,
        enable_auto_refactoring=cfg.enable_auto_refactoring,
        min_files=cfg.refactor_min_files,
        min_additions=cfg.refactor_min_additions,
    )
    return MonitorDaemon(
        detector=ChangeDetector(client, checkpoint),
        orchestrator=orchestrator,
        checkpoint=checkpoint,
        interval=interval,
        notifier=NotificationManager(),
    )


def _build_or_exit(cfg: Settings) -> MonitorDaemon:
    try:
        return build_daemon(cfg)
    except (ValueError, SafetyError, OSError) as e:
        console.print(f"[red]Cannot start: {e}[/red]")
        sys.exit(1)


def run_daemon(cfg: Settings) -> None:
    """Start the monitor daemon and block until signalled."""
    daemon = _build_or_exit(cfg)
    console.print(
        Panel.fit(
            f"[bold]PR Quality Gate[/bold]\n"
            f"Repo:        {cfg.github_owner}/{cfg.github_repo}\n"
            f"Checkout:    {Path(cfg.repo_path).resolve()} (baseline {cfg.baseline_branch})\n"
            f"Schedule:    {cfg.check_interval} ({daemon.interval}s)\n"
            f"Testing:     {'enabled' if cfg.enable_auto_testing else 'disabled'}\n"
            f"Refactoring: {'enabled' if cfg.enable_auto_refactoring else 'disabled'}",
            title="prgate",
            border_style="green",
        )
    )
    if not cfg.github_token:
        console.print("[yellow]WARNING: No PRGATE_GITHUB_TOKEN set. Comments and PRs will fail.[/yellow]\n")
    console.print("Press Ctrl+C to stop")
    asyncio.run(serve(daemon))


def run_once(cfg: Settings) -> int:
    """Run a single cycle in the foreground; exit code reflects completion."""
    daemon = _build_or_exit(cfg)
    summary = daemon.execute_cycle()
    asyncio.run(daemon.notify(summary))
    console.print_json(json.dumps(summary.to_dict()))
    return 0 if summary.completed else 1


def show_status(cfg: Settings) -> None:
    checkpoint = CheckpointStore(cfg.checkpoint_file)
    last = checkpoint.last_checked()
    console.print(
        Panel.fit(
            f"Repo:         {cfg.github_owner or '?'}/{cfg.github_repo or '?'}\n"
            f"Schedule:     {cfg.check_interval}\n"
            f"Testing:      {'Enabled' if cfg.enable_auto_testing else 'Disabled'}\n"
            f"Refactoring:  {'Enabled' if cfg.enable_auto_refactoring else 'Disabled'}\n"
            f"Last check:   {format_timestamp(last) if last else 'Never'}\n"
            f"Log file:     {cfg.log_file}\n"
            f"Report file:  {cfg.report_file}",
            title="PR Monitor Status",
            border_style="cyan",
        )
    )


def show_logs(cfg: Settings, lines: int) -> None:
    path = Path(cfg.log_file)
    if not path.exists():
        console.print(f"[yellow]No log file at {path}[/yellow]")
        return
    with open(path, encoding="utf-8", errors="replace") as f:
        recent = deque((line.rstrip("\n") for line in f if line.strip()), maxlen=lines)
    console.print(f"[cyan]Last {len(recent)} log entries:[/cyan]")
    for line in recent:
        style = "red" if " ERROR: " in line or " CRITICAL: " in line else "yellow" if " WARNING: " in line else None
        console.print(line, style=style, markup=False, highlight=False)


def show_config(cfg: Settings) -> None:
    data = cfg.model_dump()
    for secret in ("github_token", "telegram_bot_token", "slack_webhook_url", "discord_webhook_url"):
        if data.get(secret):
            data[secret] = "***"
    console.print_json(json.dumps(data))


def main() -> None:
    parser = argparse.ArgumentParser(description="Scheduled quality gate for pull requests")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("start", help="Start the monitor daemon")
    sub.add_parser("run-once", help="Run a single detection/processing cycle")
    sub.add_parser("status", help="Show checkpoint and configuration summary")

    logs_parser = sub.add_parser("logs", help="Show recent log entries")
    logs_parser.add_argument("lines", nargs="?", type=int, default=50)

    config_parser = sub.add_parser("config", help="Configuration commands")
    config_parser.add_argument("action", choices=["show"])

    args = parser.parse_args()

    if args.command in ("start", "run-once"):
        configure_logging(settings)

    if args.command == "start":
        run_daemon(settings)
    elif args.command == "run-once":
        sys.exit(run_once(settings))
    elif args.command == "status":
        show_status(settings)
    elif args.command == "logs":
        show_logs(settings, args.lines)
    elif args.command == "config":
        show_config(settings)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
