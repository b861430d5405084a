"""
Git history backend.

Supplies the newest-first commit log, resolves tags and abbreviated hashes to
full commit ids, and fetches the diff text of individual commits. The diff
fetches are independent of each other and may run in parallel.
"""

import logging
import subprocess
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from ..config import GitConfig
from ..errors import GitBackendError
from .models import CommitEntry

logger = logging.getLogger(__name__)

# Added, copied, deleted, modified, renamed and type-changed files. Renames
# are reported as a delete plus an add (--no-renames) so the new path gets a
# "+++ b/" line.
DIFF_FILTER = "ACDMRT"


class GitHistoryBackend:
    """Reads commit history and per-commit diffs from a git repository."""

    def __init__(self, repo_dir: Path, config: Optional[GitConfig] = None):
        """Initialize the backend.

        Args:
            repo_dir: Root directory of the git repository
            config: Git settings; defaults are used when omitted
        """
        self.repo_dir = Path(repo_dir)
        self.config = config or GitConfig()
        self._git_available: Optional[bool] = None

    def _run_git(self, args: List[str], check: bool = True) -> subprocess.CompletedProcess:
        command = ["git"] + args
        try:
            result = subprocess.run(
                command,
                cwd=self.repo_dir,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.config.timeout,
            )
        except subprocess.TimeoutExpired:
            raise GitBackendError(
                f"Git command timed out after {self.config.timeout}s: {' '.join(command)}",
                command,
            )
        except FileNotFoundError:
            raise GitBackendError("git is not installed or not available in PATH", command)

        if check and result.returncode != 0:
            raise GitBackendError(
                f"Git command failed in {self.repo_dir}: {' '.join(command)}: "
                f"{result.stderr.strip()}",
                command,
            )
        return result

    def is_git_available(self) -> bool:
        """Check if git is available and this is a git repository."""
        if self._git_available is not None:
            return self._git_available

        try:
            result = self._run_git(["rev-parse", "--git-dir"], check=False)
            self._git_available = result.returncode == 0
        except GitBackendError:
            self._git_available = False
        return self._git_available

    def get_log(self) -> List[CommitEntry]:
        """Return every reachable commit, newest first."""
        args = ["log", f"--date={self.config.date_format}", "--format=%H%x09%cd"]
        if self.config.all_refs:
            args.append("--all")

        result = self._run_git(args)
        entries = []
        for line in result.stdout.splitlines():
            if not line.strip():
                continue
            commit_id, _, date = line.partition("\t")
            entries.append(CommitEntry(id=commit_id, date=date))

        logger.info(f"Read {len(entries)} commits from {self.repo_dir}")
        return entries

    def resolve_target(self, target: str) -> Optional[str]:
        """Resolve a tag, branch or abbreviated hash to a full commit id."""
        result = self._run_git(
            ["rev-parse", "--verify", "--quiet", f"{target}^{{commit}}"], check=False
        )
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None

    def resolve_targets(self, targets: Sequence[str]) -> List[str]:
        """Resolve targets to commit ids, keeping unresolvable ones verbatim."""
        resolved = []
        for target in targets:
            commit_id = self.resolve_target(target)
            if commit_id is None:
                logger.warning(f"Could not resolve {target!r} to a commit")
                resolved.append(target)
            else:
                if commit_id != target:
                    logger.debug(f"Resolved {target!r} to {commit_id}")
                resolved.append(commit_id)
        return resolved

    def get_diff(self, commit_id: str) -> str:
        """Return the unified diff introduced by a single commit."""
        result = self._run_git(
            [
                "show",
                "--format=",
                "--no-color",
                "--no-ext-diff",
                "--no-renames",
                f"--diff-filter={DIFF_FILTER}",
                f"--unified={self.config.context_lines}",
                commit_id,
            ]
        )
        return result.stdout

    def get_diffs(self, commit_ids: Sequence[str]) -> Dict[str, str]:
        """Fetch the diffs of several commits in parallel."""
        if not commit_ids:
            return {}

        workers = min(self.config.diff_workers, len(commit_ids))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="git-diff") as executor:
            diffs = list(executor.map(self.get_diff, commit_ids))

        return dict(zip(commit_ids, diffs))
