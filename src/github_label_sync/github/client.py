"""GitHub label client.

This intentionally wraps PyGithub to keep GitHub calls out of the reconciler and CLI
code and make tests easy.
"""

from __future__ import annotations

import logging

import requests
from github import Auth, Github, GithubException
from github.GithubObject import NotSet
from github.Repository import Repository

from github_label_sync.labels import Label, LabelSet

logger = logging.getLogger(__name__)


class LabelApiError(Exception):
    """Raised when a label call against the remote fails."""

    def __init__(self, message: str, *, repository: str, status: int | None = None) -> None:
        super().__init__(message)
        self.repository = repository
        self.status = status

    def __str__(self) -> str:
        base = super().__str__()
        if self.status is not None:
            return f"{base} ({self.repository}, HTTP {self.status})"
        return f"{base} ({self.repository})"


class GitHubLabelClient:
    """Small wrapper around PyGithub for the label operations we need."""

    def __init__(
        self,
        *,
        token: str,
        owner: str,
        base_url: str = "https://api.github.com",
        github_api: Github | None = None,
    ) -> None:
        if not token:
            raise ValueError("GitHub token is required")
        if not owner.strip():
            raise ValueError("Repository owner is required")

        self._owner = owner.strip()
        self._base_url = base_url.rstrip("/")
        self._repos: dict[str, Repository] = {}

        if github_api is not None:
            self._github = github_api
            logger.debug("Using injected Github instance")
            return

        auth = Auth.Token(token)
        self._github = Github(auth=auth, base_url=self._base_url)
        logger.debug("GitHub client created", extra={"base_url": self._base_url})

    @property
    def owner(self) -> str:
        """Return the configured account or organization."""

        return self._owner

    def full_name(self, repo: str) -> str:
        return f"{self._owner}/{repo.strip().strip('/')}"

    def _repo(self, repo: str) -> Repository:
        full_name = self.full_name(repo)
        cached = self._repos.get(full_name)
        if cached is not None:
            return cached

        try:
            repository = self._github.get_repo(full_name)
        except (GithubException, requests.RequestException) as e:
            raise _api_error("Unable to access repository", full_name, e) from e

        self._repos[full_name] = repository
        logger.debug("Connected to repository", extra={"repository": full_name})
        return repository

    def list_labels(self, repo: str) -> LabelSet:
        full_name = self.full_name(repo)
        repository = self._repo(repo)
        try:
            labels = LabelSet.from_github(repository.get_labels())
        except (GithubException, requests.RequestException) as e:
            raise _api_error("Unable to list labels", full_name, e) from e

        logger.debug("Fetched labels", extra={"repository": full_name, "count": len(labels)})
        return labels

    def create_label(self, repo: str, label: Label) -> Label:
        full_name = self.full_name(repo)
        repository = self._repo(repo)
        description = label.description if label.description is not None else NotSet
        try:
            created = repository.create_label(label.name, label.color, description)
        except (GithubException, requests.RequestException) as e:
            raise _api_error(f"Unable to create label {label.name!r}", full_name, e) from e

        logger.info("Label created", extra={"repository": full_name, "label": label.name})
        return Label.from_github(created)

    def update_label(self, repo: str, name: str, label: Label) -> Label:
        full_name = self.full_name(repo)
        repository = self._repo(repo)
        description = label.description if label.description is not None else NotSet
        try:
            remote = repository.get_label(name)
            remote.edit(label.name, label.color, description)
        except (GithubException, requests.RequestException) as e:
            raise _api_error(f"Unable to update label {name!r}", full_name, e) from e

        logger.info(
            "Label updated",
            extra={"repository": full_name, "label": name, "color": label.color},
        )
        return Label.from_github(remote)

    def delete_label(self, repo: str, name: str) -> None:
        full_name = self.full_name(repo)
        repository = self._repo(repo)
        try:
            repository.get_label(name).delete()
        except (GithubException, requests.RequestException) as e:
            raise _api_error(f"Unable to delete label {name!r}", full_name, e) from e

        logger.info("Label deleted", extra={"repository": full_name, "label": name})

    def close(self) -> None:
        self._repos.clear()
        self._github.close()


def _api_error(message: str, repository: str, exc: Exception) -> LabelApiError:
    status = exc.status if isinstance(exc, GithubException) else None
    return LabelApiError(message, repository=repository, status=status)
