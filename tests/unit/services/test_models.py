"""Tests for pipeline value types."""

import pytest

from change_extractor.services.models import (
    ChangedPath,
    CommitEntry,
    ExtractionPlan,
    Group,
)


class TestCommitEntry:
    def test_commit_entry_immutability(self):
        entry = CommitEntry(id="abc123", date="2024-01-02T10:00:00+00:00")

        with pytest.raises(AttributeError):
            entry.id = "different"  # type: ignore

    def test_commit_entry_equality(self):
        assert CommitEntry("abc", "d") == CommitEntry("abc", "d")


class TestChangedPath:
    def test_defaults_to_text_change(self):
        assert ChangedPath("a.txt").binary is False


class TestExtractionPlan:
    def test_empty_plan(self):
        plan = ExtractionPlan()

        assert plan.is_empty
        assert plan.to_dict() == {"groups": [], "files": [], "binary": []}

    def test_plan_with_only_dataset_is_not_empty(self):
        assert not ExtractionPlan(groups=(Group("PROJ.SRC"),)).is_empty

    def test_to_dict_preserves_order(self):
        plan = ExtractionPlan(
            groups=(Group("B.SRC", ("M2", "M1")), Group("A.SRC", ())),
            files=("z.txt", "a.txt"),
            binary=("z.txt",),
        )

        assert plan.to_dict() == {
            "groups": [
                {"name": "B.SRC", "members": ["M2", "M1"]},
                {"name": "A.SRC", "members": []},
            ],
            "files": ["z.txt", "a.txt"],
            "binary": ["z.txt"],
        }
