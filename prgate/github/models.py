"""Pydantic models for the GitHub REST payloads the pipeline consumes."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class PullRequest(BaseModel):
    """An open pull request. Read-only to this system."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    number: int
    title: str
    head_ref: str
    created_at: datetime
    html_url: str = ""
    from_fork: bool = False

    @model_validator(mode="before")
    @classmethod
    def _flatten_head(cls, data: Any) -> Any:
        # GitHub nests the source branch as {"head": {"ref": ...}}
        if not isinstance(data, dict) or not isinstance(data.get("head"), dict):
            return data
        head = data["head"]
        if "head_ref" not in data:
            data = {**data, "head_ref": head.get("ref", "")}
        if "from_fork" not in data and "repo" in head:
            base_repo = (data.get("base") or {}).get("repo")
            data = {**data, "from_fork": _is_fork(head.get("repo"), base_repo)}
        return data


def _is_fork(head_repo: Any, base_repo: Any) -> bool:
    # a deleted fork comes back as "repo": null
    if not isinstance(head_repo, dict):
        return True
    if not isinstance(base_repo, dict):
        return False
    return head_repo.get("full_name") != base_repo.get("full_name")


class PullRequestFile(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    filename: str
    additions: int = 0
    deletions: int = 0
    status: str = "modified"


class CreatedPullRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    number: int
    html_url: str


class Comment(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    html_url: str = ""
    body: str = Field(default="")
