"""Exception hierarchy for Change Extractor."""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .services.extraction_planner import PlanResult


class ChangeExtractorError(Exception):
    """Base class for all Change Extractor errors."""


class NoTargetsMatched(ChangeExtractorError):
    """None of the requested commit ids or tags were found in the log.

    Only raised in strict mode; otherwise the planner reports this through
    ``PlanStatus.NO_TARGETS_MATCHED`` with an empty plan.
    """

    def __init__(self, targets, result: Optional["PlanResult"] = None):
        self.targets = list(targets)
        self.result = result
        super().__init__(
            f"None of the requested targets were found in the log: "
            f"{', '.join(self.targets) or '(none given)'}"
        )


class AmbiguousName(ChangeExtractorError):
    """The catalog could not answer for a candidate qualified name."""

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"Catalog probe failed for {name!r}: {reason}")


class GitBackendError(ChangeExtractorError):
    """A git command failed or could not be run."""

    def __init__(self, message: str, command: Optional[list] = None):
        self.command = command
        super().__init__(message)
