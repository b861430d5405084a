"""
Extraction planning: resolve, aggregate, classify.

Glues the pipeline stages together. Diff text is obtained through a callable
so the planner itself never talks to git.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Mapping, Optional, Sequence

from ..errors import NoTargetsMatched
from .diff_aggregator import DiffAggregator
from .git_backend import GitHistoryBackend
from .history_resolver import HistoryResolver
from .models import CommitEntry, CommitRange, ExtractionPlan
from .name_validator import NameValidator
from .path_classifier import PathClassifier

logger = logging.getLogger(__name__)

DiffSource = Callable[[Sequence[str]], Mapping[str, str]]


class PlanStatus(Enum):
    PLANNED = "planned"
    NO_TARGETS_MATCHED = "no_targets_matched"


@dataclass(frozen=True)
class PlanResult:
    """Outcome of one extraction run."""

    plan: ExtractionPlan
    commit_range: Optional[CommitRange]
    status: PlanStatus

    @property
    def no_targets_matched(self) -> bool:
        return self.status is PlanStatus.NO_TARGETS_MATCHED


class ExtractionPlanner:
    """Runs HistoryResolver, DiffAggregator and PathClassifier in sequence."""

    def __init__(
        self,
        validator: Optional[NameValidator] = None,
        resolver: Optional[HistoryResolver] = None,
        aggregator: Optional[DiffAggregator] = None,
    ):
        self.resolver = resolver or HistoryResolver()
        self.aggregator = aggregator or DiffAggregator()
        self.classifier = PathClassifier(validator)

    def plan(
        self,
        log: Sequence[CommitEntry],
        targets: Sequence[str],
        diff_source: DiffSource,
        strict: bool = False,
        requested: Optional[Sequence[str]] = None,
    ) -> PlanResult:
        """Build the extraction plan for ``targets``.

        Args:
            log: Commit entries, newest first
            targets: Commit ids to cover
            diff_source: Returns diff text keyed by commit id for the given ids
            strict: Raise NoTargetsMatched instead of returning an empty plan
            requested: Targets as the user named them, reported by NoTargetsMatched
                when they differ from the resolved ``targets``

        Raises:
            NoTargetsMatched: In strict mode, when no target is in the log
        """
        commit_range = self.resolver.resolve(log, targets)
        if commit_range is None:
            result = PlanResult(
                plan=ExtractionPlan(),
                commit_range=None,
                status=PlanStatus.NO_TARGETS_MATCHED,
            )
            if strict:
                raise NoTargetsMatched(targets if requested is None else requested, result)
            return result

        logger.info(
            f"Resolved range {commit_range.newest.id[:12]}..{commit_range.oldest.id[:12]} "
            f"({len(commit_range.ordered)} commits)"
        )

        diffs = diff_source(commit_range.commit_ids)
        paths = self.aggregator.aggregate(commit_range, diffs)
        plan = self.classifier.classify(paths)

        return PlanResult(plan=plan, commit_range=commit_range, status=PlanStatus.PLANNED)

    def plan_from_backend(
        self, backend: GitHistoryBackend, targets: Sequence[str], strict: bool = False
    ) -> PlanResult:
        """Build the plan reading log and diffs from a git backend."""
        commit_ids = backend.resolve_targets(targets)
        log = backend.get_log()
        return self.plan(
            log, commit_ids, backend.get_diffs, strict=strict, requested=targets
        )
