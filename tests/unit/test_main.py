"""CLI tests with the GitHub client replaced by a mock."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import Mock

import pytest

from github_label_sync import main as cli
from github_label_sync.github.client import GitHubLabelClient, LabelApiError
from github_label_sync.labels import Label, LabelSet


@pytest.fixture
def github(monkeypatch: pytest.MonkeyPatch, clean_env: Path) -> Mock:
    monkeypatch.setenv("LABEL_SYNC_GITHUB_TOKEN", "test-token")
    monkeypatch.setenv("LOG_LEVEL", "INFO")

    client = Mock(spec=GitHubLabelClient)
    client.owner = "octo-org"
    client.list_labels.return_value = LabelSet(
        [Label(name="bug", color="d73a4a"), Label(name="stale", color="cccccc")]
    )
    factory = Mock(return_value=client)
    monkeypatch.setattr(cli, "GitHubLabelClient", factory)
    client.factory = factory
    return client


def test_sync_uses_repos_from_config(
    github: Mock, labels_file: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    code = cli.main(["sync", "--config", str(labels_file)])

    assert code == 0
    github.factory.assert_called_once_with(
        token="test-token", owner="octo-org", base_url="https://api.github.com"
    )
    github.list_labels.assert_called_once_with("octo-repo")
    github.create_label.assert_called_once_with("octo-repo", Label(name="wontfix", color="ffffff"))
    github.update_label.assert_not_called()
    github.delete_label.assert_not_called()
    github.close.assert_called_once()
    assert "octo-org/octo-repo: created=1 updated=0 deleted=0 (ok)" in capsys.readouterr().out


def test_sync_remove_absent_for_each_repo(github: Mock, labels_file: Path) -> None:
    code = cli.main(
        ["sync", "--config", str(labels_file), "--repo", "a", "--repo", "b", "--remove-absent"]
    )

    assert code == 0
    assert [c.args for c in github.list_labels.call_args_list] == [("a",), ("b",)]
    assert [c.args for c in github.delete_label.call_args_list] == [("a", "stale"), ("b", "stale")]


def test_sync_label_failure_exits_zero_unless_strict(github: Mock, labels_file: Path) -> None:
    github.create_label.side_effect = LabelApiError("boom", repository="octo-org/octo-repo")

    assert cli.main(["sync", "--config", str(labels_file)]) == 0
    assert cli.main(["sync", "--config", str(labels_file), "--strict"]) == 1


def test_fetch_failure_skips_repository_by_default(github: Mock, labels_file: Path) -> None:
    github.list_labels.side_effect = LabelApiError("down", repository="octo-org/octo-repo")

    code = cli.main(["sync", "--config", str(labels_file), "--strict"])

    assert code == 1
    github.create_label.assert_not_called()


def test_fetch_failure_with_empty_policy_creates_everything(
    github: Mock, labels_file: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("LABEL_SYNC_FETCH_ERROR_POLICY", "empty")
    github.list_labels.side_effect = LabelApiError("down", repository="octo-org/octo-repo")

    code = cli.main(["sync", "--config", str(labels_file), "--remove-absent"])

    assert code == 0
    assert github.create_label.call_count == 2
    github.delete_label.assert_not_called()


def test_dry_run_calls_nothing(github: Mock, labels_file: Path) -> None:
    code = cli.main(["sync", "--config", str(labels_file), "--dry-run", "--remove-absent"])

    assert code == 0
    github.create_label.assert_not_called()
    github.delete_label.assert_not_called()


def test_sync_without_repos_is_an_error(github: Mock, tmp_path: Path) -> None:
    path = tmp_path / "labels.yaml"
    path.write_text("owner: octo-org\nlabels: []\n", encoding="utf-8")

    assert cli.main(["sync", "--config", str(path)]) == 2


def test_missing_token_is_a_config_error(
    clean_env: Path, labels_file: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    code = cli.main(["sync", "--config", str(labels_file)])

    assert code == 2
    assert "Configuration error" in capsys.readouterr().err


def test_malformed_host_aborts_before_any_call(github: Mock, tmp_path: Path) -> None:
    path = tmp_path / "labels.yaml"
    path.write_text("owner: octo-org\nhost: '::nope'\nrepos: [r]\n", encoding="utf-8")

    assert cli.main(["sync", "--config", str(path)]) == 2
    github.factory.assert_not_called()


def test_list_prints_labels(
    github: Mock, labels_file: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    code = cli.main(["list", "--config", str(labels_file), "--repo", "octo-repo"])

    assert code == 0
    out = capsys.readouterr().out
    assert "bug\td73a4a\t\n" in out
    assert "stale\tcccccc\t\n" in out


def test_failures_are_logged_as_json(
    github: Mock, labels_file: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    github.create_label.side_effect = LabelApiError("boom", repository="octo-org/octo-repo")

    cli.main(["sync", "--config", str(labels_file)])

    records = [
        json.loads(line)
        for line in capsys.readouterr().out.splitlines()
        if line.startswith("{")
    ]
    errors = [r for r in records if r["level"] == "ERROR"]
    assert errors
    assert errors[0]["owner"] == "octo-org"
    assert errors[0]["repository"] == "octo-repo"
    assert errors[0]["label"] == "wontfix"
    assert errors[0]["action"] == "create"
    assert "boom" in errors[0]["extra"]["error"]


def test_unknown_log_level_is_a_config_error(
    github: Mock,
    labels_file: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.setenv("LOG_LEVEL", "verbose")

    code = cli.main(["sync", "--config", str(labels_file), "--dry-run"])

    assert code == 2
    assert "Configuration error" in capsys.readouterr().err
    github.factory.assert_not_called()


def test_summary_is_logged_for_every_repository(
    github: Mock, labels_file: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    code = cli.main(["sync", "--config", str(labels_file), "--repo", "a", "--repo", "b"])

    assert code == 0
    records = [
        json.loads(line)
        for line in capsys.readouterr().out.splitlines()
        if line.startswith("{")
    ]
    summaries = [r for r in records if r["message"] == "Reconciliation finished"]
    assert [s["repository"] for s in summaries] == ["a", "b"]
    assert summaries[0]["extra"]["labels_created"] == 1
