"""
History resolution: from a set of requested commits to a bounded range.

Operators name commits and tags in any order. Scanning the newest-first log
once, the resolver finds the newest and oldest requested commits and returns
the contiguous slice of history between them.
"""

import logging
from typing import List, Optional, Sequence

from .models import CommitEntry, CommitRange

logger = logging.getLogger(__name__)


class HistoryResolver:
    """Computes the commit range covering a set of targets."""

    def resolve(
        self, log: Sequence[CommitEntry], targets: Sequence[str]
    ) -> Optional[CommitRange]:
        """Resolve ``targets`` against a newest-first ``log``.

        The range starts at the first matched commit and ends at the last one;
        commits before the first match or after the last are excluded.
        Targets that never appear in the log are ignored.

        Args:
            log: Commit entries ordered newest first
            targets: Commit ids to locate, in any order

        Returns:
            The bounding CommitRange, or None when nothing matched
        """
        remaining: List[str] = list(targets)
        if not remaining:
            return None

        newest: Optional[CommitEntry] = None
        oldest: Optional[CommitEntry] = None
        ordered: List[CommitEntry] = []
        pending: List[CommitEntry] = []

        for entry in log:
            if newest is not None:
                pending.append(entry)

            if entry.id not in remaining:
                continue

            remaining.remove(entry.id)
            if newest is None:
                newest = entry
                pending.append(entry)
            oldest = entry
            ordered.extend(pending)
            pending = []

            if not remaining:
                break

        if newest is None or oldest is None:
            logger.info(f"No requested target found in {len(log)} log entries")
            return None

        if remaining:
            logger.info(f"Targets not found in log: {', '.join(remaining)}")

        return CommitRange(newest=newest, oldest=oldest, ordered=tuple(ordered))
