"""Label reconciliation.

Converges a repository's labels to a desired `LabelSet` in three fixed phases,
all computed against one snapshot of the existing labels:

1. create every desired label whose name is missing remotely
2. update every desired label whose remote color differs
3. delete every remote label absent from the desired set (opt-in)

Matching is by exact name. Color is the only dirty-check field, so a
description-only change never produces an update. Every remote call is
independent: a failing label is logged and recorded, and the run moves on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Protocol

from github_label_sync.github.client import LabelApiError
from github_label_sync.labels import Label, LabelSet

logger = logging.getLogger(__name__)


class LabelApi(Protocol):
    """Remote label operations used by the reconciler."""

    @property
    def owner(self) -> str: ...

    def list_labels(self, repo: str) -> LabelSet: ...

    def create_label(self, repo: str, label: Label) -> Label: ...

    def update_label(self, repo: str, name: str, label: Label) -> Label: ...

    def delete_label(self, repo: str, name: str) -> None: ...


class ChangeAction(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True, slots=True)
class LabelChange:
    """One remote call the reconciler intends to make.

    `name` identifies the remote label being changed; `label` carries the full
    desired definition for creates and updates and is None for deletes.
    """

    action: ChangeAction
    name: str
    label: Label | None = None

    def __str__(self) -> str:
        if self.label is None:
            return f"{self.action} {self.name!r}"
        return f"{self.action} {self.name!r} (color={self.label.color})"


@dataclass(frozen=True, slots=True)
class FailedChange:
    change: LabelChange
    error: str


@dataclass(slots=True)
class ReconcileReport:
    """Outcome of reconciling one repository."""

    repository: str
    applied: list[LabelChange] = field(default_factory=list)
    failed: list[FailedChange] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    def _count(self, action: ChangeAction) -> int:
        return sum(1 for change in self.applied if change.action is action)

    @property
    def created(self) -> int:
        return self._count(ChangeAction.CREATE)

    @property
    def updated(self) -> int:
        return self._count(ChangeAction.UPDATE)

    @property
    def deleted(self) -> int:
        return self._count(ChangeAction.DELETE)


class Reconciler:
    """Apply a desired label set to repositories through a `LabelApi`."""

    def __init__(self, *, api: LabelApi, desired: LabelSet, dry_run: bool = False) -> None:
        self._api = api
        self._desired = desired
        self._dry_run = dry_run

    def plan(self, existing: LabelSet, *, remove_absent: bool) -> list[LabelChange]:
        """Return the ordered changes needed to converge `existing` to the desired set."""

        changes = self._missing(existing)
        changes.extend(self._changed(existing))
        if remove_absent:
            changes.extend(self._absent(existing))
        return changes

    def _missing(self, existing: LabelSet) -> list[LabelChange]:
        return [
            LabelChange(action=ChangeAction.CREATE, name=label.name, label=label)
            for label in self._desired
            if not existing.contains(label.name)
        ]

    def _changed(self, existing: LabelSet) -> list[LabelChange]:
        changes: list[LabelChange] = []
        for label in self._desired:
            current = existing.find(label.name)
            if current is not None and current.color != label.color:
                changes.append(LabelChange(action=ChangeAction.UPDATE, name=label.name, label=label))
        return changes

    def _absent(self, existing: LabelSet) -> list[LabelChange]:
        return [
            LabelChange(action=ChangeAction.DELETE, name=label.name)
            for label in existing
            if not self._desired.contains(label.name)
        ]

    def reconcile(self, existing: LabelSet, repo: str, *, remove_absent: bool) -> ReconcileReport:
        """Apply the plan for `repo`; per-label failures are reported, not raised."""

        report = ReconcileReport(repository=f"{self._api.owner}/{repo}")
        changes = self.plan(existing, remove_absent=remove_absent)

        logger.info(
            "Reconciling labels",
            extra={
                "owner": self._api.owner,
                "repository": repo,
                "planned_changes": len(changes),
                "remove_absent": remove_absent,
                "dry_run": self._dry_run,
            },
        )

        for change in changes:
            if self._dry_run:
                logger.info(
                    "Dry run: would %s label",
                    change.action,
                    extra={
                        "owner": self._api.owner,
                        "repository": repo,
                        "label": change.name,
                        "action": str(change.action),
                    },
                )
                report.applied.append(change)
                continue

            try:
                self._apply(repo, change)
            except LabelApiError as e:
                logger.error(
                    "Unable to %s label",
                    change.action,
                    extra={
                        "owner": self._api.owner,
                        "repository": repo,
                        "label": change.name,
                        "action": str(change.action),
                        "error": str(e),
                    },
                )
                report.failed.append(FailedChange(change=change, error=str(e)))
                continue

            report.applied.append(change)

        logger.info(
            "Reconciliation finished",
            extra={
                "owner": self._api.owner,
                "repository": repo,
                "labels_created": report.created,
                "labels_updated": report.updated,
                "labels_deleted": report.deleted,
                "labels_failed": len(report.failed),
            },
        )
        return report

    def set_labels(self, existing: LabelSet, repo: str, remove_absent: bool) -> ReconcileReport:
        """Entry point used by the CLI: converge `repo` to the desired labels."""

        return self.reconcile(existing, repo, remove_absent=remove_absent)

    def _apply(self, repo: str, change: LabelChange) -> None:
        # Deletes are the only changes planned without a desired label.
        if change.label is None:
            self._api.delete_label(repo, change.name)
        elif change.action is ChangeAction.CREATE:
            self._api.create_label(repo, change.label)
        else:
            self._api.update_label(repo, change.name, change.label)
