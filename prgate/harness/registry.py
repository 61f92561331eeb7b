"""Check registry: the ordered check list, from YAML or the built-in defaults.

checks.yaml format::

    checks:
      - name: Build
        kind: command
        command: npm run build
        critical: true
      - name: Lint
        kind: lint
        command: npm run lint
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from prgate.config import Settings
from prgate.workspace.process import split_command
from prgate.workspace.safety import validate_command

from .checks import Check, build_check

logger = logging.getLogger(__name__)


def _check_command(name: str, command: str) -> None:
    validate_command(command)
    try:
        split_command(command)
    except ValueError as e:
        raise ValueError(f"Check '{name}' has an unparseable command {command!r}: {e}") from e


def default_checks(cfg: Settings) -> list[Check]:
    """The standard sequence: critical build steps first, advisory scans after."""
    specs: list[tuple[str, str, bool, str]] = [
        ("Install Dependencies", "command", True, cfg.install_command),
        ("Build", "command", True, cfg.build_command),
        ("Type Check", "command", True, cfg.typecheck_command),
        ("Lint", "lint", False, cfg.lint_command),
        ("Dependency Audit", "audit", False, cfg.audit_command),
        ("Code Quality", "code-quality", False, ""),
        ("Bundle Size", "bundle-size", False, ""),
        ("Security Scan", "security-scan", False, ""),
        ("Accessibility", "accessibility", False, ""),
    ]
    checks = []
    for name, kind, critical, command in specs:
        if command:
            _check_command(name, command)
        elif kind in ("command", "audit", "lint"):
            logger.info("Check '%s' disabled (no command configured)", name)
            continue
        checks.append(build_check(name, kind, critical, command))
    return checks


def _parse_entry(raw: dict[str, Any]) -> Check:
    name = str(raw.get("name", "")).strip()
    if not name:
        raise ValueError(f"Check entry without a name: {raw!r}")
    command = str(raw.get("command", "") or "")
    if command:
        _check_command(name, command)
    return build_check(
        name=name,
        kind=str(raw.get("kind", "command")),
        critical=bool(raw.get("critical", False)),
        command=command,
    )


def load_checks(path: Path | str) -> list[Check]:
    """Parse a checks YAML file. Malformed files raise ValueError."""
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"{path}: invalid YAML: {e}") from e

    entries = data.get("checks") if isinstance(data, dict) else None
    if not isinstance(entries, list) or not entries:
        raise ValueError(f"{path}: expected a non-empty 'checks' list")

    checks = [_parse_entry(entry) for entry in entries if isinstance(entry, dict)]
    if len(checks) != len(entries):
        raise ValueError(f"{path}: every check entry must be a mapping")

    logger.info("Loaded %d checks from %s", len(checks), path)
    return checks


def resolve_checks(cfg: Settings) -> list[Check]:
    if cfg.checks_file:
        return load_checks(cfg.checks_file)
    return default_checks(cfg)
