"""Commit-to-package attribution.

A commit belongs to a package when any strategy in an ordered list claims
it. Strategies are tried in order and the first match wins, so the
recorded reason is always the earliest strategy that matched:

1. file-based: the commit touched a file under the package directory
2. scope-based: the conventional scope names the package or its folder
3. name-mention: the package name appears anywhere in the message
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from typing import TYPE_CHECKING

from packaging.utils import canonicalize_name

from .catalog import PackageCatalog
from .commits import parse_subject
from .exceptions import GitOperationError, ReleaseError
from .models import CommitRecord, FilteredCommit, FilterReason, PackageDescriptor, Result

if TYPE_CHECKING:
    from .repository import Repository

Strategy = Callable[[CommitRecord, PackageDescriptor], FilterReason | None]


def by_changed_files(changed_files: Callable[[str], list[str]]) -> Strategy:
    """Build the file-based strategy around a changed-files lookup.

    A failing lookup counts as "no match" for that commit only, and the
    next strategy gets its turn.
    """

    def strategy(commit: CommitRecord, package: PackageDescriptor) -> FilterReason | None:
        try:
            files = changed_files(commit.hash)
        except GitOperationError:
            return None
        prefix = package.path_prefix
        if any(path.startswith(prefix) for path in files):
            return FilterReason.FILE_BASED
        return None

    return strategy


def by_scope(commit: CommitRecord, package: PackageDescriptor) -> FilterReason | None:
    """Match on the conventional-commit scope.

    The scope matches when it equals the package name, contains it
    ("api,auth" for "auth"), equals the package folder name (scope "auth"
    for packages/auth/), or equals the name after PEP 503 normalization
    (scope "auth-lib" for "Auth_Lib").
    """
    parsed = parse_subject(commit.message)
    if parsed is None or not parsed.scope:
        return None
    scope = parsed.scope
    name = package.name
    if (
        scope == name
        or name in scope
        or (package.folder_name and scope == package.folder_name)
        or canonicalize_name(scope) == canonicalize_name(name)
    ):
        return FilterReason.SCOPE_BASED
    return None


def by_name_mention(
    commit: CommitRecord, package: PackageDescriptor
) -> FilterReason | None:
    if package.name in commit.message:
        return FilterReason.NAME_MENTION
    return None


class CommitFilter:
    """Attributes commits to catalog packages.

    Args:
        catalog: Package lookup for the repository.
        changed_files: Returns the paths touched by a commit hash. Without
            it the file-based strategy is left out.
        strategies: Overrides the default strategy list entirely.
    """

    def __init__(
        self,
        catalog: PackageCatalog,
        changed_files: Callable[[str], list[str]] | None = None,
        strategies: Sequence[Strategy] | None = None,
    ) -> None:
        self.catalog = catalog
        if strategies is None:
            strategies = [by_scope, by_name_mention]
            if changed_files is not None:
                strategies.insert(0, by_changed_files(changed_files))
        self.strategies = tuple(strategies)

    @classmethod
    def for_repository(cls, repo: Repository) -> CommitFilter:
        return cls(repo.catalog, changed_files=repo.git.get_changed_files)

    def match(
        self, commit: CommitRecord, package: PackageDescriptor
    ) -> FilterReason | None:
        """Return the reason of the first strategy that claims ``commit``."""
        for strategy in self.strategies:
            reason = strategy(commit, package)
            if reason is not None:
                return reason
        return None

    def select(
        self, package_name: str, commits: Iterable[CommitRecord]
    ) -> list[FilteredCommit]:
        """Keep the commits that belong to ``package_name``, in input order.

        Raises:
            PackageNotFoundError: If the package is not in the catalog.
        """
        package = self.catalog.find(package_name)
        selected: list[FilteredCommit] = []
        for commit in commits:
            reason = self.match(commit, package)
            if reason is not None:
                selected.append(FilteredCommit(**commit.model_dump(), filter_reason=reason))
        return selected

    def filter_for_package(
        self, package_name: str, commits: Iterable[CommitRecord]
    ) -> Result[list[FilteredCommit]]:
        try:
            selected = self.select(package_name, commits)
        except ReleaseError as exc:
            return Result.fail(
                f"Failed to filter commits for package '{package_name}': {exc}"
            )
        return Result.ok(
            f"Filtered {len(selected)} commits for package '{package_name}'", selected
        )
