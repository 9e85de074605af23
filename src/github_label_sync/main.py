"""CLI entrypoint for label sync."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from github_label_sync import __version__
from github_label_sync.config import (
    ConfigError,
    LabelsConfig,
    LabelSyncSettings,
    load_labels_config,
)
from github_label_sync.github.client import GitHubLabelClient, LabelApiError
from github_label_sync.labels import LabelSet
from github_label_sync.logging import configure_logging
from github_label_sync.reconciler import ReconcileReport, Reconciler

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="label-sync",
        description="Reconcile GitHub issue labels with a declared desired state",
    )
    parser.add_argument(
        "--version", action="version", version=f"github-label-sync {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    sync = subparsers.add_parser("sync", help="Create, update and optionally delete labels")
    sync.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Desired labels YAML file (defaults to LABEL_SYNC_CONFIG or labels.yaml)",
    )
    sync.add_argument(
        "--repo",
        "--repository",
        dest="repos",
        action="append",
        default=None,
        help="Repository name under the configured owner (repeatable; defaults to 'repos')",
    )
    sync.add_argument(
        "--remove-absent",
        action="store_true",
        help="Delete remote labels that are not in the desired set",
    )
    sync.add_argument(
        "--dry-run",
        action="store_true",
        help="Log planned changes without calling the GitHub API for them",
    )
    sync.add_argument(
        "--strict",
        action="store_true",
        help="Exit non-zero when any label change or label listing failed",
    )

    list_labels = subparsers.add_parser("list", help="Print the labels of a repository")
    list_labels.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Labels YAML file providing owner and host",
    )
    list_labels.add_argument(
        "--repo",
        "--repository",
        dest="repository",
        required=True,
        help="Repository name under the configured owner",
    )

    return parser


def _fetch_existing(
    github: GitHubLabelClient, repo: str, *, policy: str
) -> LabelSet | None:
    """Return the existing labels, or None when the repository should be skipped."""

    try:
        return github.list_labels(repo)
    except LabelApiError as e:
        if policy == "empty":
            logger.warning(
                "Unable to list labels; treating existing set as empty",
                extra={"owner": github.owner, "repository": repo, "error": str(e)},
            )
            return LabelSet()
        logger.error(
            "Unable to list labels; skipping repository",
            extra={"owner": github.owner, "repository": repo, "error": str(e)},
        )
        return None


def _run_sync(
    args: argparse.Namespace,
    settings: LabelSyncSettings,
    config: LabelsConfig,
    github: GitHubLabelClient,
) -> int:
    repos = args.repos or config.repos
    if not repos:
        print("No repositories given (use --repo or 'repos' in the config file)", file=sys.stderr)
        return 2

    reconciler = Reconciler(api=github, desired=config.desired(), dry_run=args.dry_run)
    reports: list[ReconcileReport] = []
    fetch_failures = 0

    for repo in repos:
        existing = _fetch_existing(github, repo, policy=settings.fetch_error_policy)
        if existing is None:
            fetch_failures += 1
            continue
        reports.append(reconciler.set_labels(existing, repo, args.remove_absent))

    for report in reports:
        status = "ok" if report.ok else f"{len(report.failed)} failed"
        print(
            f"{report.repository}: created={report.created} updated={report.updated} "
            f"deleted={report.deleted} ({status})"
        )
        for failed in report.failed:
            print(f"  failed to {failed.change}: {failed.error}", file=sys.stderr)

    if args.strict and (fetch_failures or any(not r.ok for r in reports)):
        return 1
    return 0


def _run_list(args: argparse.Namespace, github: GitHubLabelClient) -> int:
    try:
        labels = github.list_labels(args.repository)
    except LabelApiError as e:
        logger.error(
            "Unable to list labels",
            extra={"owner": github.owner, "repository": args.repository, "error": str(e)},
        )
        return 1

    for label in labels:
        print(f"{label.name}\t{label.color}\t{label.description or ''}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = LabelSyncSettings()
        config = load_labels_config(args.config or settings.config_path)
        base_url = config.base_url(settings)
    except (ValidationError, ConfigError) as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error:", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(settings.log_level)

    try:
        github = GitHubLabelClient(
            token=settings.github_token,
            owner=config.owner,
            base_url=base_url,
        )
        try:
            if args.command == "sync":
                return _run_sync(args, settings, config, github)
            if args.command == "list":
                return _run_list(args, github)
        finally:
            github.close()

        logger.error("Unknown command", extra={"command": args.command})
        return 2

    except Exception:
        logger.exception("Command failed")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
