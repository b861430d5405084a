"""
Path classification into dataset groups and hierarchical files.

Each changed path is split at its last ``/``. When the prefix validates as a
qualified name the path is a member of that dataset, otherwise the whole path
goes to the hierarchical file store. Members of one dataset normally arrive
as a contiguous run (git sorts paths within a commit), so groups are built
with a single "current group" accumulator that is flushed whenever the prefix
changes.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from .models import ChangedPath, ExtractionPlan, Group, NameStatus
from .name_validator import NameValidator

logger = logging.getLogger(__name__)


def split_path(path: str) -> Tuple[str, Optional[str]]:
    """Split a path at its final ``/`` into (prefix, suffix)."""
    prefix, sep, suffix = path.rpartition("/")
    if not sep:
        return path, None
    return prefix, suffix


class _PlanBuilder:
    """Mutable accumulator for one classification pass."""

    def __init__(self, validator: NameValidator):
        self.validator = validator
        self.groups: Dict[str, List[str]] = {}
        self.files: List[str] = []
        self.binary: List[str] = []
        self.current_name: Optional[str] = None
        self.current_members: List[str] = []
        self._status_cache: Dict[str, NameStatus] = {}

    def _validate(self, prefix: str) -> NameStatus:
        status = self._status_cache.get(prefix)
        if status is None:
            status = self.validator.validate(prefix)
            self._status_cache[prefix] = status
        return status

    def add(self, changed: ChangedPath) -> None:
        prefix, suffix = split_path(changed.path)

        if changed.binary and changed.path not in self.binary:
            self.binary.append(changed.path)

        if self._validate(prefix) is NameStatus.INVALID:
            if changed.path not in self.files:
                self.files.append(changed.path)
            return

        if prefix != self.current_name:
            self.flush_pending()
            self.current_name = prefix

        if suffix and suffix not in self.current_members:
            self.current_members.append(suffix)

    def flush_pending(self) -> None:
        """Move the current group onto the output, merging with an earlier run."""
        if self.current_name is None:
            return

        members = self.groups.setdefault(self.current_name, [])
        for member in self.current_members:
            if member not in members:
                members.append(member)

        self.current_name = None
        self.current_members = []

    def build(self) -> ExtractionPlan:
        return ExtractionPlan(
            groups=tuple(
                Group(name=name, members=tuple(members))
                for name, members in self.groups.items()
            ),
            files=tuple(self.files),
            binary=tuple(self.binary),
        )


class PathClassifier:
    """Sorts changed paths into an ExtractionPlan."""

    def __init__(self, validator: Optional[NameValidator] = None):
        self.validator = validator or NameValidator()

    def classify(self, paths: Sequence[ChangedPath]) -> ExtractionPlan:
        builder = _PlanBuilder(self.validator)
        for changed in paths:
            builder.add(changed)
        builder.flush_pending()

        plan = builder.build()
        logger.info(
            f"Classified {len(paths)} paths into {len(plan.groups)} datasets "
            f"and {len(plan.files)} files"
        )
        return plan
