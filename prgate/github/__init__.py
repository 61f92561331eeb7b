from prgate.github.client import GitHubClient, RemoteAPIError
from prgate.github.models import Comment, CreatedPullRequest, PullRequest, PullRequestFile

__all__ = [
    "Comment",
    "CreatedPullRequest",
    "GitHubClient",
    "PullRequest",
    "PullRequestFile",
    "RemoteAPIError",
]
