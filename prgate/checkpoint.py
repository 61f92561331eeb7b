"""Checkpoint: the "last successfully scanned" timestamp.

One ISO-8601 line on disk, overwritten atomically at the end of each
completed cycle. Reads never fail: a missing or corrupt file falls back
to a lookback window so the daemon keeps running.
"""

from __future__ import annotations

import logging
import os
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_LOOKBACK = timedelta(hours=24)


class FilesystemError(Exception):
    """Raised when checkpoint or report I/O fails."""


def parse_timestamp(raw: str) -> datetime:
    """Parse an ISO-8601 timestamp, treating naive values as UTC."""
    text = raw.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    ts = datetime.fromisoformat(text)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def format_timestamp(ts: datetime) -> str:
    return ts.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def atomic_write_text(path: Path, text: str) -> None:
    """Write via a temp file in the same directory, then rename over ``path``."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(text)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as e:
        raise FilesystemError(f"Could not write {path}: {e}") from e


class CheckpointStore:
    """File-backed single-timestamp store."""

    def __init__(self, path: Path | str, lookback: timedelta = DEFAULT_LOOKBACK) -> None:
        self.path = Path(path)
        self.lookback = lookback

    def default(self) -> datetime:
        return datetime.now(timezone.utc) - self.lookback

    def last_checked(self) -> datetime | None:
        """The persisted timestamp, or None if absent or unreadable."""
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning("Checkpoint unreadable (%s): %s", self.path, e)
            return None
        try:
            return parse_timestamp(raw)
        except ValueError:
            logger.warning("Checkpoint malformed (%s): %r", self.path, raw[:64])
            return None

    def read(self) -> datetime:
        ts = self.last_checked()
        if ts is None:
            ts = self.default()
            logger.info("No usable checkpoint, looking back to %s", format_timestamp(ts))
        return ts

    def write(self, ts: datetime) -> None:
        atomic_write_text(self.path, format_timestamp(ts) + "\n")
        logger.debug("Checkpoint advanced to %s", format_timestamp(ts))
