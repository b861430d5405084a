"""Value types shared by the extraction pipeline."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Tuple


class NameStatus(Enum):
    """Outcome of qualified-name validation."""

    VALID = "valid"
    INVALID = "invalid"


class CatalogStatus(Enum):
    """Answer of the structured-record catalog for an existence query."""

    EXISTS = "exists"
    NOT_FOUND = "not_found"
    INVALID_SYNTAX = "invalid_syntax"


@dataclass(frozen=True)
class CommitEntry:
    """One entry of the commit log, as received from the backend."""

    id: str
    date: str


@dataclass(frozen=True)
class CommitRange:
    """Contiguous slice of the log bounded by the first and last matched target.

    ``ordered`` keeps the log's newest-first order and runs from ``newest``
    to ``oldest`` inclusive.
    """

    newest: CommitEntry
    oldest: CommitEntry
    ordered: Tuple[CommitEntry, ...]

    @property
    def commit_ids(self) -> Tuple[str, ...]:
        return tuple(entry.id for entry in self.ordered)


@dataclass(frozen=True)
class ChangedPath:
    """A path reported by a diff, optionally flagged as a binary change."""

    path: str
    binary: bool = False


@dataclass(frozen=True)
class Group:
    """A dataset and the members changed in it, in first-seen order."""

    name: str
    members: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ExtractionPlan:
    """Terminal result: datasets with members, and hierarchical file paths."""

    groups: Tuple[Group, ...] = ()
    files: Tuple[str, ...] = ()
    binary: Tuple[str, ...] = field(default=())

    @property
    def is_empty(self) -> bool:
        return not self.groups and not self.files

    def to_dict(self) -> Dict[str, Any]:
        """Render the plan as JSON-serialisable data for the materializers."""
        return {
            "groups": [
                {"name": group.name, "members": list(group.members)}
                for group in self.groups
            ],
            "files": list(self.files),
            "binary": list(self.binary),
        }
