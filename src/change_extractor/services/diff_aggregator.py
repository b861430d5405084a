"""
Diff aggregation: changed paths across a commit range.

Recognises two kinds of lines in per-commit diff text:

* text changes, reported as ``+++ b/<path>``
* binary changes, reported as ``<meta> a/<path> and b/<path> differ``
  (git prints ``Binary files a/x and b/x differ``)

All other lines, including hunk content, are ignored.
"""

import logging
import re
from typing import List, Mapping, Optional, Tuple

from .models import ChangedPath, CommitRange

logger = logging.getLogger(__name__)

TEXT_MARKER = "+++ b/"

# <meta> must not look like diff body content (context, added, removed, hunk
# header or "\ No newline at end of file").
_BINARY_MARKER = re.compile(
    r"^(?P<meta>[^ +\-@\\].*?) (?:a/.+|/dev/null) and b/(?P<path>.+) differ$"
)

_DISCARDED_PREFIXES = ("/", ".")


def parse_marker(line: str) -> Optional[ChangedPath]:
    """Extract the changed path from a single diff line, if it is a marker."""
    if line.startswith(TEXT_MARKER):
        # git appends a tab to names that contain spaces
        path = line[len(TEXT_MARKER) :].rstrip("\t")
        if not path:
            logger.debug(f"Ignoring marker without a path: {line!r}")
            return None
        return ChangedPath(path=path)

    if line.endswith(" differ") and " and b/" in line:
        match = _BINARY_MARKER.match(line)
        if match is None:
            logger.debug(f"Ignoring malformed binary marker: {line!r}")
            return None
        return ChangedPath(path=match.group("path"), binary=True)

    return None


class DiffAggregator:
    """Collects changed paths from the diffs of a commit range."""

    def aggregate(
        self, commit_range: CommitRange, diff_text_by_commit: Mapping[str, str]
    ) -> Tuple[ChangedPath, ...]:
        """Scan each commit's diff in range order.

        A path identical to the one on the previous recognised line is
        skipped; repeats further apart are kept for the classifier to merge.
        Absolute and hidden paths are dropped.
        """
        paths: List[ChangedPath] = []
        previous: Optional[str] = None

        for entry in commit_range.ordered:
            diff_text = diff_text_by_commit.get(entry.id)
            if not diff_text:
                logger.debug(f"No diff text for commit {entry.id}")
                continue

            for line in diff_text.splitlines():
                changed = parse_marker(line)
                if changed is None:
                    continue
                if changed.path == previous:
                    continue
                previous = changed.path

                if changed.path.startswith(_DISCARDED_PREFIXES):
                    logger.debug(f"Discarding path {changed.path!r}")
                    continue
                paths.append(changed)

        logger.info(
            f"Aggregated {len(paths)} changed paths from "
            f"{len(commit_range.ordered)} commits"
        )
        return tuple(paths)
