"""Tests for repo_release.cli."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from repo_release.cli import cli
from repo_release.models import CommitRecord


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def patched_git(mock_git: MagicMock):
    with patch("repo_release.repository.GitClient", return_value=mock_git):
        yield mock_git


class TestInfo:
    def test_monorepo(self, runner: CliRunner, monorepo: Path) -> None:
        result = runner.invoke(cli, ["--root", str(monorepo), "info"])

        assert result.exit_code == 0, result.output
        assert "Monorepo repository" in result.output
        assert "tag format: ${name}@${version}" in result.output
        assert "@org/pkg 1.0.0 (packages/pkg/)" in result.output

    def test_missing_manifest(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["--root", str(tmp_path), "info"])
        assert result.exit_code == 1
        assert "No pyproject.toml found" in result.output


class TestSuggest:
    def test_single(self, runner: CliRunner, single_repo: Path) -> None:
        result = runner.invoke(cli, ["--root", str(single_repo), "suggest"])

        assert result.exit_code == 0, result.output
        assert "1.0.1-canary.0" in result.output
        assert "2.0.0" in result.output

    def test_monorepo_needs_package(self, runner: CliRunner, monorepo: Path) -> None:
        result = runner.invoke(cli, ["--root", str(monorepo), "suggest"])
        assert result.exit_code == 1
        assert "Package name is required" in result.output


class TestFilter:
    def test_lists_matches(
        self, runner: CliRunner, monorepo: Path, patched_git: MagicMock
    ) -> None:
        patched_git.get_commits.return_value = [
            CommitRecord(hash="a1b2c3d4e5", message="fix(auth): handle null token"),
            CommitRecord(hash="f6e5d4c3b2", message="docs: unrelated"),
        ]

        result = runner.invoke(cli, ["--root", str(monorepo), "filter", "auth"])

        assert result.exit_code == 0, result.output
        assert "Filtered 1 commits for package 'auth'" in result.output
        assert "a1b2c3d [scope-based] fix(auth): handle null token" in result.output


class TestTag:
    def test_dry_run(self, runner: CliRunner, single_repo: Path) -> None:
        result = runner.invoke(cli, ["--root", str(single_repo), "tag", "2.0.0", "--dry-run"])

        assert result.exit_code == 0, result.output
        assert "Dry run: Tag creation skipped: v2.0.0" in result.output

    def test_creates_and_pushes(
        self, runner: CliRunner, monorepo: Path, patched_git: MagicMock
    ) -> None:
        result = runner.invoke(
            cli, ["--root", str(monorepo), "tag", "1.3.0", "--package", "auth", "--push"]
        )

        assert result.exit_code == 0, result.output
        patched_git.create_tag.assert_called_once_with("auth@1.3.0", "Release auth@1.3.0")
        patched_git.push_tags.assert_called_once_with()

    def test_invalid_version(self, runner: CliRunner, single_repo: Path) -> None:
        result = runner.invoke(cli, ["--root", str(single_repo), "tag", "two"])
        assert result.exit_code == 1
        assert "Invalid version format: two" in result.output


class TestNotes:
    def test_writes_file(
        self, runner: CliRunner, single_repo: Path, patched_git: MagicMock, tmp_path: Path
    ) -> None:
        patched_git.get_commits.return_value = [
            CommitRecord(hash="1", message="feat: first feature")
        ]
        output = tmp_path / "NOTES.md"

        result = runner.invoke(
            cli, ["--root", str(single_repo), "notes", "v1.0.0", "--output", str(output)]
        )

        assert result.exit_code == 0, result.output
        assert output.read_text().startswith("## Changes in v1.0.0\n")


class TestPrepareRelease:
    def test_dry_run(self, runner: CliRunner, monorepo: Path, patched_git: MagicMock) -> None:
        result = runner.invoke(
            cli,
            [
                "--root",
                str(monorepo),
                "prepare-release",
                "1.3.0",
                "--package",
                "auth",
                "--dry-run",
            ],
        )

        assert result.exit_code == 0, result.output
        assert "release/auth@1.3.0" in result.output
        assert "1.2.0 → 1.3.0" in result.output
        patched_git.create_branch.assert_not_called()

    def test_no_push(self, runner: CliRunner, single_repo: Path, patched_git: MagicMock) -> None:
        result = runner.invoke(
            cli, ["--root", str(single_repo), "prepare-release", "1.1.0", "--no-push"]
        )

        assert result.exit_code == 0, result.output
        patched_git.push_branch.assert_not_called()
        assert "git push -u origin release/v1.1.0" in result.output


class TestVersion:
    def test_dry_run(self, runner: CliRunner, single_repo: Path) -> None:
        result = runner.invoke(
            cli, ["--root", str(single_repo), "version", "--type", "minor", "--dry-run"]
        )

        assert result.exit_code == 0, result.output
        assert "Dry run: v1.1.0 would be created" in result.output
        assert "my-app: 1.0.0 → 1.1.0" in result.output

    def test_package_release(
        self, runner: CliRunner, monorepo: Path, patched_git: MagicMock
    ) -> None:
        result = runner.invoke(
            cli,
            [
                "--root",
                str(monorepo),
                "version",
                "--type",
                "prerelease",
                "--package",
                "auth",
                "--no-push",
            ],
        )

        assert result.exit_code == 0, result.output
        assert "tag: auth@1.2.1-canary.0" in result.output
        patched_git.create_tag.assert_called_once_with(
            "auth@1.2.1-canary.0", "Release auth@1.2.1-canary.0"
        )
        patched_git.push_tags.assert_not_called()

    def test_rejects_unknown_type(self, runner: CliRunner, single_repo: Path) -> None:
        result = runner.invoke(cli, ["--root", str(single_repo), "version", "--type", "huge"])
        assert result.exit_code == 2
