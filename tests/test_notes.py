"""Tests for repo_release.notes."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

from repo_release.exceptions import GitOperationError
from repo_release.models import CommitRecord, Topology
from repo_release.notes import ReleaseNotesGenerator, previous_tag, render_release_notes
from repo_release.tags import TagTemplate


def commits(*messages: str) -> list[CommitRecord]:
    return [CommitRecord(hash=f"c{i}", message=m) for i, m in enumerate(messages)]


class TestRenderReleaseNotes:
    def test_sections_in_fixed_order(self) -> None:
        """Features, then Bug Fixes, then Chores, whatever the input order."""
        notes = render_release_notes(
            "v1.1.0", commits("chore: tidy", "feat: add login", "fix: null token")
        )

        assert notes.index("Features") < notes.index("Bug Fixes") < notes.index("Chores")

    def test_document(self) -> None:
        notes = render_release_notes(
            "v1.1.0",
            commits("feat(auth): add login", "Update readme", "feat: add logout"),
        )

        assert notes == (
            "## Changes in v1.1.0\n"
            "\n"
            "### 🚀 Features\n"
            "\n"
            "- add login\n"
            "- add logout\n"
            "\n"
            "### 📝 Other Changes\n"
            "\n"
            "- Update readme\n"
        )

    def test_empty_sections_omitted(self) -> None:
        notes = render_release_notes("v1.0.1", commits("fix: one"))
        assert "Features" not in notes
        assert "Other Changes" not in notes


SINGLE = TagTemplate.for_strategy("v${version}", Topology.SINGLE)


class TestPreviousTag:
    def test_ignores_newer_tags(self) -> None:
        """Notes for v1.1.0 start at v1.0.0 even after v2.0.0 exists."""
        assert previous_tag(SINGLE, "v1.1.0", ["v2.0.0", "v1.1.0", "v1.0.0"]) == "v1.0.0"

    def test_release_outranks_its_prerelease(self) -> None:
        tags = ["v1.0.1-canary.0", "v1.0.1", "v1.0.0"]
        assert previous_tag(SINGLE, "v1.1.0", tags) == "v1.0.1"

    def test_skips_foreign_tags(self) -> None:
        assert previous_tag(SINGLE, "v1.1.0", ["vnext", "v1.0.0"]) == "v1.0.0"

    def test_none_when_oldest(self) -> None:
        assert previous_tag(SINGLE, "v1.0.0", ["v2.0.0", "v1.0.0"]) is None


class TestReleaseNotesGenerator:
    def test_single_repo_since_last_tag(
        self, single_repo: Path, open_repo, mock_git: MagicMock
    ) -> None:
        mock_git.list_tags.return_value = ["v1.0.0", "v0.9.0"]
        mock_git.get_commits_since_tag.return_value = commits("feat: new thing")

        result = ReleaseNotesGenerator(open_repo(single_repo)).generate("v1.1.0")

        assert result.success
        assert "- new thing" in result.data
        mock_git.list_tags.assert_called_once_with("v*")
        mock_git.get_commits_since_tag.assert_called_once_with("v1.0.0", until="HEAD")

    def test_existing_tag_uses_previous_tag(
        self, single_repo: Path, open_repo, mock_git: MagicMock
    ) -> None:
        """Notes for an already-created tag cover the range up to that tag."""
        mock_git.list_tags.return_value = ["v1.1.0", "v1.0.0"]
        mock_git.tag_exists.return_value = True
        mock_git.get_commits_since_tag.return_value = commits("fix: bug")

        ReleaseNotesGenerator(open_repo(single_repo)).generate("v1.1.0")

        mock_git.get_commits_since_tag.assert_called_once_with("v1.0.0", until="v1.1.0")

    def test_older_tag_after_newer_release(
        self, single_repo: Path, open_repo, mock_git: MagicMock
    ) -> None:
        mock_git.list_tags.return_value = ["v2.0.0", "v1.1.0", "v1.0.0"]
        mock_git.tag_exists.return_value = True
        mock_git.get_commits_since_tag.return_value = commits("feat: middle")

        result = ReleaseNotesGenerator(open_repo(single_repo)).generate("v1.1.0")

        assert result.success, result.message
        mock_git.get_commits_since_tag.assert_called_once_with("v1.0.0", until="v1.1.0")

    def test_tag_outside_format(
        self, single_repo: Path, open_repo, mock_git: MagicMock
    ) -> None:
        result = ReleaseNotesGenerator(open_repo(single_repo)).generate("latest")

        assert not result.success
        assert "does not match format" in result.message

    def test_falls_back_to_full_history(
        self, single_repo: Path, open_repo, mock_git: MagicMock
    ) -> None:
        mock_git.get_commits.return_value = commits("feat: first")

        result = ReleaseNotesGenerator(open_repo(single_repo)).generate("v1.0.0")

        assert result.success
        mock_git.get_commits.assert_called_once_with(until="HEAD")

    def test_independent_filters_by_package(
        self, monorepo: Path, open_repo, mock_git: MagicMock
    ) -> None:
        mock_git.list_tags.return_value = ["auth@1.2.0"]
        mock_git.get_commits_since_tag.return_value = commits(
            "fix(auth): handle null token", "feat(pkg): unrelated"
        )

        result = ReleaseNotesGenerator(open_repo(monorepo)).generate("auth@1.2.1", "auth")

        assert "- handle null token" in result.data
        assert "unrelated" not in result.data
        mock_git.list_tags.assert_called_once_with("auth@*")

    def test_independent_requires_package(
        self, monorepo: Path, open_repo, mock_git: MagicMock
    ) -> None:
        result = ReleaseNotesGenerator(open_repo(monorepo)).generate("auth@1.2.1")
        assert not result.success
        assert "Package name is required" in result.message

    def test_fixed_uses_all_commits(
        self, fixed_monorepo: Path, open_repo, mock_git: MagicMock
    ) -> None:
        mock_git.get_commits.return_value = commits("feat(alpha): a", "fix(beta): b")

        result = ReleaseNotesGenerator(open_repo(fixed_monorepo)).generate("v3.0.0")

        assert "- a" in result.data
        assert "- b" in result.data

    def test_no_commits(self, single_repo: Path, open_repo, mock_git: MagicMock) -> None:
        result = ReleaseNotesGenerator(open_repo(single_repo)).generate("v1.0.0")
        assert not result.success
        assert "No commits found" in result.message

    def test_git_failure(self, single_repo: Path, open_repo, mock_git: MagicMock) -> None:
        mock_git.list_tags.side_effect = GitOperationError("list tags", "not a git repository")

        result = ReleaseNotesGenerator(open_repo(single_repo)).generate("v1.0.0")

        assert not result.success
        assert "Failed to list tags" in result.message
