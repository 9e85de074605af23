#!/usr/bin/env python3
"""Programmatic label sync example.

This demonstrates using the components directly:

* load settings from `.env`
* declare the desired labels in code instead of YAML
* print the plan, then apply it

The owner and repository are passed as arguments.
"""

from __future__ import annotations

import argparse
from typing import Sequence

from github_label_sync import Label, LabelSet, Reconciler
from github_label_sync.config import LabelSyncSettings
from github_label_sync.github.client import GitHubLabelClient
from github_label_sync.logging import configure_logging

DESIRED = LabelSet(
    [
        Label(name="bug", color="d73a4a", description="Something isn't working"),
        Label(name="enhancement", color="a2eeef", description="New feature or request"),
        Label(name="wontfix", color="ffffff"),
    ]
)


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Sync a fixed label set (programmatic example).")
    parser.add_argument("--owner", required=True, help="Account or organization")
    parser.add_argument("--repo", required=True, help="Repository name")
    parser.add_argument("--remove-absent", action="store_true", help="Delete undeclared labels")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = LabelSyncSettings()
    configure_logging(settings.log_level)

    github = GitHubLabelClient(
        token=settings.github_token,
        owner=args.owner,
        base_url=settings.github_base_url,
    )
    try:
        existing = github.list_labels(args.repo)
        reconciler = Reconciler(api=github, desired=DESIRED)

        for change in reconciler.plan(existing, remove_absent=args.remove_absent):
            print(f"planned: {change}")

        report = reconciler.set_labels(existing, args.repo, args.remove_absent)
    finally:
        github.close()

    print(f"created={report.created} updated={report.updated} deleted={report.deleted}")
    return 0 if report.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
