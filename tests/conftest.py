"""Test configuration and fixtures."""

import logging
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import Mock

import pytest

from github_label_sync.github.client import GitHubLabelClient
from github_label_sync.labels import Label, LabelSet


@pytest.fixture(autouse=True)
def restore_logging() -> Iterator[None]:
    """Undo `configure_logging` so log level and handlers never leak between tests."""
    loggers = [logging.getLogger(), logging.getLogger("github"), logging.getLogger("urllib3")]
    levels = [logger.level for logger in loggers]
    handlers = list(loggers[0].handlers)
    yield
    for logger, level in zip(loggers, levels):
        logger.setLevel(level)
    loggers[0].handlers[:] = handlers


@pytest.fixture
def desired() -> LabelSet:
    """Provide the desired labels from the documented example."""
    return LabelSet(
        [
            Label(name="bug", color="d73a4a", description="Something isn't working"),
            Label(name="wontfix", color="ffffff"),
        ]
    )


@pytest.fixture
def existing() -> LabelSet:
    """Provide a remote snapshot overlapping the desired labels."""
    return LabelSet(
        [
            Label(name="bug", color="d73a4a"),
            Label(name="stale", color="cccccc"),
        ]
    )


@pytest.fixture
def mock_api() -> Mock:
    """Provide a label client double that records calls."""
    api = Mock(spec=GitHubLabelClient)
    api.owner = "octo-org"
    return api


@pytest.fixture
def labels_file(tmp_path: Path) -> Path:
    """Write a minimal desired-state file."""
    path = tmp_path / "labels.yaml"
    path.write_text(
        "\n".join(
            [
                "owner: octo-org",
                "repos:",
                "  - octo-repo",
                "labels:",
                "  - name: bug",
                "    color: '#D73A4A'",
                "    description: Something isn't working",
                "  - name: wontfix",
                "    color: ffffff",
                "",
            ]
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def clean_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate settings from the developer's environment and `.env`."""
    for name in (
        "LABEL_SYNC_GITHUB_TOKEN",
        "GITHUB_BASE_URL",
        "LOG_LEVEL",
        "LABEL_SYNC_CONFIG",
        "LABEL_SYNC_FETCH_ERROR_POLICY",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path
