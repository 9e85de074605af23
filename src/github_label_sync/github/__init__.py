"""GitHub integration for label sync."""

from github_label_sync.github.client import GitHubLabelClient, LabelApiError

__all__ = ["GitHubLabelClient", "LabelApiError"]
