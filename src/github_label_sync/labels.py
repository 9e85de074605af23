"""Label data model.

A `LabelSet` is an ordered snapshot of labels for one repository. Names are the
matching key and are compared case-sensitively. Duplicate names are not
rejected; lookups return the first match.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Label:
    name: str
    color: str
    description: str | None = None

    @classmethod
    def from_github(cls, label: Any) -> Label:
        """Build a label from a PyGithub `Label` (or anything shaped like one)."""

        description = getattr(label, "description", None)
        return cls(
            name=label.name,
            color=label.color,
            description=description if isinstance(description, str) else None,
        )


class LabelSet:
    """Immutable, ordered collection of labels scoped to one repository."""

    __slots__ = ("_labels",)

    def __init__(self, labels: Iterable[Label] = ()) -> None:
        self._labels: tuple[Label, ...] = tuple(labels)

    @classmethod
    def from_github(cls, labels: Iterable[Any]) -> LabelSet:
        return cls(Label.from_github(label) for label in labels)

    def contains(self, name: str) -> bool:
        return self.find(name) is not None

    def find(self, name: str) -> Label | None:
        for label in self._labels:
            if label.name == name:
                return label
        return None

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.contains(name)

    def __iter__(self) -> Iterator[Label]:
        return iter(self._labels)

    def __len__(self) -> int:
        return len(self._labels)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LabelSet):
            return NotImplemented
        return self._labels == other._labels

    def __hash__(self) -> int:
        return hash(self._labels)

    def __repr__(self) -> str:
        return f"LabelSet({list(self._labels)!r})"
