"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from repo_release.git import GitClient
from repo_release.repository import Repository


def write_pyproject(directory: Path, content: str) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / "pyproject.toml"
    path.write_text(content)
    return path


def write_package(root: Path, rel: str, name: str, version: str) -> Path:
    return write_pyproject(
        root / rel,
        f'[project]\nname = "{name}"\nversion = "{version}"\n',
    )


@pytest.fixture
def single_repo(tmp_path: Path) -> Path:
    """A single-project repository at version 1.0.0."""
    write_pyproject(
        tmp_path,
        """\
[project]
name = "my-app"
version = "1.0.0"  # bumped by release
dependencies = ["click>=8.0"]
""",
    )
    return tmp_path


@pytest.fixture
def monorepo(tmp_path: Path) -> Path:
    """A uv workspace with independent versioning and two packages."""
    write_pyproject(
        tmp_path,
        """\
[project]
name = "workspace-root"
version = "0.0.0"

[tool.uv.workspace]
members = ["packages/*"]

[tool.repo-release]
versioning-strategy = "independent"
""",
    )
    write_package(tmp_path, "packages/auth", "auth", "1.2.0")
    write_package(tmp_path, "packages/pkg", "@org/pkg", "1.0.0")
    return tmp_path


@pytest.fixture
def fixed_monorepo(tmp_path: Path) -> Path:
    """A fixed-versioning workspace whose packages sit at different versions."""
    write_pyproject(
        tmp_path,
        """\
[tool.uv.workspace]
members = ["packages/*"]

[tool.repo-release]
versioning-strategy = "fixed"
""",
    )
    write_package(tmp_path, "packages/alpha", "alpha", "2.1.0")
    write_package(tmp_path, "packages/beta", "beta", "2.4.3")
    return tmp_path


@pytest.fixture
def mock_git() -> MagicMock:
    """A GitClient double; every git call is recorded, none is executed."""
    git = MagicMock(spec=GitClient)
    git.remote = "origin"
    git.list_tags.return_value = []
    git.tag_exists.return_value = False
    git.get_commits.return_value = []
    git.get_changed_files.return_value = []
    return git


@pytest.fixture
def open_repo(mock_git: MagicMock):
    """Open a repository at a path with the mocked git client."""

    def _open(root: Path) -> Repository:
        return Repository.open(root, git=mock_git)

    return _open
