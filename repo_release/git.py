"""Git collaborator used by the release engine.

Every method shells out through ``shell.git`` against one working tree and
raises GitOperationError, naming the failed stage, when git fails.
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from pathlib import Path

from .commits import format_commit_message
from .exceptions import GitOperationError
from .models import CommitRecord
from .shell import git

_FIELD = "\x1f"
_RECORD = "\x1e"
LOG_FORMAT = f"--format=%H{_FIELD}%an{_FIELD}%aI{_FIELD}%B{_RECORD}"


def parse_log(output: str) -> list[CommitRecord]:
    """Parse ``git log`` output produced with LOG_FORMAT."""
    commits: list[CommitRecord] = []
    for record in output.split(_RECORD):
        record = record.strip("\n")
        if not record:
            continue
        sha, author, date, message = record.split(_FIELD, 3)
        commits.append(
            CommitRecord(hash=sha, author=author, date=date, message=message.strip())
        )
    return commits


class GitClient:
    """Git operations on the working tree at ``root``.

    Args:
        root: Working tree. Defaults to the current directory.
        remote: Remote that tags and branches are pushed to.
    """

    def __init__(self, root: Path | None = None, remote: str = "origin") -> None:
        self.root = root if root is not None else Path.cwd()
        self.remote = remote

    def _git(self, stage: str, *args: str) -> str:
        try:
            return git(*args, cwd=self.root)
        except subprocess.CalledProcessError as exc:
            stderr = (exc.stderr or "").strip()
            detail = stderr or f"git {' '.join(args)} exited with {exc.returncode}"
            raise GitOperationError(stage, detail, stderr) from exc
        except FileNotFoundError as exc:
            raise GitOperationError(stage, "git executable not found") from exc

    def is_repo(self) -> bool:
        try:
            output = git("rev-parse", "--is-inside-work-tree", cwd=self.root, check=False)
        except FileNotFoundError:
            return False
        return output == "true"

    def get_changed_files(self, commit_hash: str) -> list[str]:
        """List repository-relative paths touched by a commit."""
        output = self._git(
            "list changed files",
            "diff-tree",
            "--no-commit-id",
            "--name-only",
            "-r",
            "--root",
            commit_hash,
        )
        return output.splitlines()

    def get_commits(self, until: str = "HEAD") -> list[CommitRecord]:
        """Full history of ``until``, most recent first."""
        return parse_log(self._git("read commit history", "log", LOG_FORMAT, until))

    def get_commits_since_tag(self, tag: str, until: str = "HEAD") -> list[CommitRecord]:
        """Commits reachable from ``until`` but not from ``tag``, most recent first."""
        return parse_log(
            self._git("read commit history", "log", LOG_FORMAT, f"{tag}..{until}")
        )

    def tag_exists(self, name: str) -> bool:
        return name in self.list_tags(name)

    def list_tags(self, pattern: str | None = None) -> list[str]:
        """Tags matching a glob pattern, highest version first.

        Pre-releases sort below their release: v1.0.1 before v1.0.1-rc.0.
        """
        args = ["-c", "versionsort.suffix=-", "tag", "--list"]
        if pattern:
            args.append(pattern)
        args.append("--sort=-v:refname")
        output = self._git("list tags", *args)
        return output.splitlines() if output else []

    def latest_tag(self, pattern: str | None = None) -> str | None:
        tags = self.list_tags(pattern)
        return tags[0] if tags else None

    def create_tag(self, name: str, message: str) -> None:
        """Create an annotated tag on HEAD."""
        self._git("create tag", "tag", "-a", name, "-m", message)

    def push_tags(self) -> None:
        self._git("push tags", "push", self.remote, "--tags")

    def create_branch(self, name: str) -> None:
        """Create ``name`` from HEAD and check it out."""
        self._git("create branch", "checkout", "-b", name)

    def push_branch(self, name: str) -> None:
        self._git("push branch", "push", "-u", self.remote, name)

    def commit_changes(
        self,
        kind: str,
        message: str,
        scope: str | None = None,
        body: str | None = None,
        paths: Sequence[str] = (),
    ) -> None:
        """Stage ``paths`` and commit them with a conventional message."""
        if paths:
            self._git("stage changes", "add", "--", *paths)
        self._git(
            "commit changes",
            "commit",
            "-m",
            format_commit_message(kind, message, scope=scope, body=body),
        )
