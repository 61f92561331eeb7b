"""Monitor daemon: runs the detection/processing cycle on a fixed interval.

One cycle runs immediately at start, then one per interval. Cycles run on
a single worker thread behind an asyncio.Lock, so two cycles can never
overlap. Stopping sets a threading.Event the orchestrator checks between
units, then waits for the in-flight unit to finish so the checkout is back
on its baseline branch.
"""

from __future__ import annotations

import asyncio
import logging
import re
import signal
import threading
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import partial
from typing import Any

from prgate.checkpoint import CheckpointStore, FilesystemError, format_timestamp
from prgate.detector import ChangeDetector
from prgate.github.client import RemoteAPIError
from prgate.notifications import NotificationManager
from prgate.pipeline.models import PipelineOutcome, PipelineRun
from prgate.pipeline.orchestrator import Orchestrator

logger = logging.getLogger(__name__)

_DURATION = re.compile(r"^(\d+)\s*([smh]?)$")
_UNIT_SECONDS = {"": 1, "s": 1, "m": 60, "h": 3600}
_CRON_MINUTE_STEP = re.compile(r"^\*/(\d+) \* \* \* \*$")
_CRON_HOUR_STEP = re.compile(r"^0 \*/(\d+) \* \* \*$")


def parse_schedule(expr: str) -> int:
    """Turn a schedule expression into an interval in seconds.

    Accepts plain seconds ("300"), durations ("30s", "5m", "2h") and the
    fixed-step cron forms "*/N * * * *", "* * * * *", "0 */N * * *" and
    "0 * * * *". Anything else raises ValueError.
    """
    text = " ".join(expr.split())
    seconds: int | None = None

    m = _DURATION.match(text)
    if m:
        seconds = int(m.group(1)) * _UNIT_SECONDS[m.group(2)]
    elif text == "* * * * *":
        seconds = 60
    elif text == "0 * * * *":
        seconds = 3600
    elif m := _CRON_MINUTE_STEP.match(text):
        seconds = int(m.group(1)) * 60
    elif m := _CRON_HOUR_STEP.match(text):
        seconds = int(m.group(1)) * 3600

    if seconds is None:
        raise ValueError(f"Unsupported schedule expression: {expr!r}")
    if seconds <= 0:
        raise ValueError(f"Schedule interval must be positive: {expr!r}")
    return seconds


@dataclass
class CycleSummary:
    """Outcome of one detection + processing cycle."""

    started_at: datetime
    detected: int = 0
    runs: list[PipelineRun] = field(default_factory=list)
    completed: bool = False
    error: str | None = None
    duration_ms: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "started_at": format_timestamp(self.started_at),
            "detected": self.detected,
            "processed": len(self.runs),
            "outcomes": {r.pr_number: r.outcome.value for r in self.runs},
            "completed": self.completed,
            "error": self.error,
            "duration_ms": self.duration_ms,
        }


class MonitorDaemon:
    """Owns the schedule, the single-flight lock and the shutdown signal.

    Lifecycle:
        daemon = MonitorDaemon(detector, orchestrator, checkpoint, interval=300)
        await daemon.start()
        ...
        await daemon.stop()
    """

    def __init__(
        self,
        detector: ChangeDetector,
        orchestrator: Orchestrator,
        checkpoint: CheckpointStore,
        interval: int,
        notifier: NotificationManager | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.detector = detector
        self.orchestrator = orchestrator
        self.checkpoint = checkpoint
        self.interval = interval
        self.notifier = notifier
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="prgate-cycle")
        self._executor_closed = False
        self._cycle_lock = asyncio.Lock()
        self._stop_event = threading.Event()
        self._task: asyncio.Task[None] | None = None
        self._running = False
        self.cycles_run = 0
        self.last_summary: CycleSummary | None = None

    # -- public API ------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def cycle_in_progress(self) -> bool:
        return self._cycle_lock.locked()

    async def start(self) -> None:
        if self._running:
            logger.warning("Monitor daemon is already running")
            return
        self._running = True
        self._stop_event.clear()
        if self._executor_closed:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="prgate-cycle")
            self._executor_closed = False
        self._task = asyncio.create_task(self._monitor_loop(), name="prgate-monitor")
        logger.info("Monitor daemon started (interval=%ds)", self.interval)

    async def stop(self) -> None:
        """Stop scheduling; let the in-flight unit finish and restore its branch."""
        self._running = False
        self._stop_event.set()
        if self._task:
            self._task.cancel()
            await asyncio.gather(self._task, return_exceptions=True)
            self._task = None
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, partial(self._executor.shutdown, wait=True))
        self._executor_closed = True
        logger.info("Monitor daemon stopped")

    async def run_cycle_now(self) -> CycleSummary | None:
        """Run one cycle unless one is already in progress (then returns None)."""
        if self._cycle_lock.locked():
            logger.warning("Cycle already in progress, skipping this tick")
            return None
        async with self._cycle_lock:
            loop = asyncio.get_running_loop()
            summary = await loop.run_in_executor(self._executor, self.execute_cycle)
        self.cycles_run += 1
        self.last_summary = summary
        await self.notify(summary)
        return summary

    def status(self) -> dict[str, Any]:
        last = self.checkpoint.last_checked()
        return {
            "running": self._running,
            "cycle_in_progress": self.cycle_in_progress,
            "interval_seconds": self.interval,
            "cycles_run": self.cycles_run,
            "last_checkpoint": format_timestamp(last) if last else None,
            "last_cycle": self.last_summary.to_dict() if self.last_summary else None,
        }

    # -- cycle -----------------------------------------------------------------

    def execute_cycle(self) -> CycleSummary:
        """Detect, process every unit, then advance the checkpoint.

        The checkpoint moves to the cycle's start time, and only when every
        detected unit was visited; otherwise the next cycle sees them again.
        """
        t0 = time.perf_counter()
        summary = CycleSummary(started_at=self._clock())
        logger.info("Starting PR monitor cycle...")

        try:
            prs = self.detector.detect(self.checkpoint.read())
        except RemoteAPIError as e:
            summary.error = str(e)
            logger.error("Error fetching pull requests: %s", e)
            summary.duration_ms = int((time.perf_counter() - t0) * 1000)
            return summary

        summary.detected = len(prs)
        if not prs:
            logger.info("No new pull requests found.")
        summary.runs = self.orchestrator.process_all(prs, self._stop_event)

        if len(summary.runs) < len(prs):
            summary.error = "cycle interrupted by shutdown"
        else:
            try:
                self.checkpoint.write(summary.started_at)
                summary.completed = True
            except FilesystemError as e:
                summary.error = str(e)
                logger.error("Checkpoint not advanced: %s", e)

        summary.duration_ms = int((time.perf_counter() - t0) * 1000)
        logger.info(
            "PR monitor cycle %s (%d detected, %d processed, %dms)",
            "complete" if summary.completed else "incomplete",
            summary.detected, len(summary.runs), summary.duration_ms,
        )
        return summary

    async def notify(self, summary: CycleSummary) -> None:
        """Send the notifications one finished cycle calls for."""
        if self.notifier is None or not self.notifier.is_enabled:
            return
        if summary.error and not summary.completed:
            await self.notifier.notify_cycle_failed(summary.error)
        for run in summary.runs:
            if run.outcome in (PipelineOutcome.FAILED, PipelineOutcome.ERROR):
                await self.notifier.notify_checks_failed(run.pr_number, run.errors)
            if run.remediation is not None and run.remediation.pr_url:
                await self.notifier.notify_remediation_opened(run.pr_number, run.remediation.pr_url)

    # -- core loop -------------------------------------------------------------

    async def _monitor_loop(self) -> None:
        """Main loop: cycle → sleep out the rest of the interval → repeat."""
        while self._running:
            started = time.monotonic()
            try:
                await self.run_cycle_now()
            except asyncio.CancelledError:
                break
            except Exception:
                logger.exception("Scheduled PR check failed")

            if not self._running:
                break
            delay = max(0.0, self.interval - (time.monotonic() - started))
            try:
                await asyncio.sleep(delay)
            except asyncio.CancelledError:
                break


async def serve(daemon: MonitorDaemon) -> None:
    """Run the daemon until SIGINT or SIGTERM."""
    shutdown = asyncio.Event()
    loop = asyncio.get_running_loop()

    def _on_signal(sig: signal.Signals) -> None:
        logger.warning("Received %s, shutting down gracefully...", sig.name)
        shutdown.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _on_signal, sig)
        except NotImplementedError:  # Windows event loops
            signal.signal(sig, lambda s, _f: loop.call_soon_threadsafe(shutdown.set))

    await daemon.start()
    await shutdown.wait()
    await daemon.stop()
