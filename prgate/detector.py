"""Change detection: open pull requests newer than the checkpoint."""

from __future__ import annotations

import logging
from datetime import datetime

from prgate.checkpoint import CheckpointStore, format_timestamp
from prgate.github.client import GitHubClient
from prgate.github.models import PullRequest

logger = logging.getLogger(__name__)


class ChangeDetector:
    """Filters the remote pull request list against the checkpoint.

    Read-only: advancing the checkpoint is the scheduler's job, after the
    whole cycle has been processed.
    """

    def __init__(self, client: GitHubClient, checkpoint: CheckpointStore) -> None:
        self.client = client
        self.checkpoint = checkpoint

    def detect(self, since: datetime | None = None) -> list[PullRequest]:
        """Return open pull requests created strictly after ``since``, newest first."""
        boundary = since if since is not None else self.checkpoint.read()
        pulls = self.client.list_open_pull_requests()
        fresh = [pr for pr in pulls if pr.created_at > boundary]
        fresh.sort(key=lambda pr: pr.created_at, reverse=True)
        logger.info(
            "Found %d new pull request(s) since %s (%d open)",
            len(fresh), format_timestamp(boundary), len(pulls),
        )
        return fresh
