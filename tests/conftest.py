"""
Shared pytest fixtures for Change Extractor tests.

Provides log/diff builders for the pure pipeline tests and a throwaway git
repository for the backend integration tests.
"""

import shutil
import subprocess
from pathlib import Path
from typing import Callable, Dict, List

import pytest

from change_extractor.services.models import CommitEntry
from change_extractor.utils.exception_logger import ExceptionLogger


def make_log(*ids: str) -> List[CommitEntry]:
    """Build a newest-first log whose dates mirror the ids."""
    return [CommitEntry(id=commit_id, date=f"date-{commit_id}") for commit_id in ids]


def text_diff(*paths: str) -> str:
    """Render a minimal unified diff touching ``paths``."""
    chunks = []
    for path in paths:
        chunks.append(
            f"diff --git a/{path} b/{path}\n"
            "index 83db48f..bf269f4 100644\n"
            f"--- a/{path}\n"
            f"+++ b/{path}\n"
            "@@ -1 +1 @@\n"
            "-old line\n"
            "+new line\n"
        )
    return "".join(chunks)


def binary_diff(path: str) -> str:
    return (
        f"diff --git a/{path} b/{path}\n"
        "index 0a1b2c3..4d5e6f7 100644\n"
        f"Binary files a/{path} and b/{path} differ\n"
    )


@pytest.fixture(autouse=True)
def reset_exception_logger():
    """Give every test a fresh ExceptionLogger singleton."""
    ExceptionLogger._instance = None
    yield
    ExceptionLogger._instance = None


@pytest.fixture
def git_repo(tmp_path) -> Path:
    """Empty git repository with a committer identity configured."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")

    repo_path = tmp_path / "repo"
    repo_path.mkdir()
    subprocess.run(["git", "init", "-q"], cwd=repo_path, check=True)
    subprocess.run(["git", "config", "user.name", "Test"], cwd=repo_path, check=True)
    subprocess.run(
        ["git", "config", "user.email", "test@test.com"], cwd=repo_path, check=True
    )
    subprocess.run(["git", "config", "commit.gpgsign", "false"], cwd=repo_path, check=True)
    return repo_path


@pytest.fixture
def commit_files(git_repo) -> Callable[[Dict[str, bytes], str], str]:
    """Write files into the test repository, commit them and return the hash."""

    def _commit(files: Dict[str, bytes], message: str) -> str:
        for relative, content in files.items():
            target = git_repo / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        subprocess.run(["git", "add", "-A"], cwd=git_repo, check=True)
        subprocess.run(["git", "commit", "-q", "-m", message], cwd=git_repo, check=True)
        result = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            cwd=git_repo,
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout.strip()

    return _commit


@pytest.fixture
def build_log():
    return make_log


@pytest.fixture
def build_text_diff():
    return text_diff


@pytest.fixture
def build_binary_diff():
    return binary_diff
