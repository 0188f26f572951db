"""Bump-and-tag releases.

The in-place counterpart of a branch release: the new version is written to
the package manifest, committed on the current branch and tagged there.

    plan → [dry run stops here] → check tag is free → write version
    → commit bump → tag → push tags

As with branch releases nothing is rolled back. A failure after the
manifest is written leaves the working tree (and any bump commit) as is.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from .exceptions import InvalidTagError, ReleaseError
from .models import BumpType, Result, Topology, VersionRelease
from .shell import step
from .tags import TagCreator
from .versions import next_version, require_valid_version

if TYPE_CHECKING:
    from .repository import Repository


class VersionReleaser:
    """Bumps a package version and tags the bump commit."""

    def __init__(self, repo: Repository) -> None:
        self.repo = repo

    def plan(
        self,
        bump: BumpType = BumpType.PATCH,
        package_name: str | None = None,
        custom_version: str | None = None,
    ) -> VersionRelease:
        """Compute the new version and its tag without touching git.

        ``custom_version`` replaces the computed increment when given.
        Pre-releases use the configured identifier.

        Raises:
            InvalidVersionError: If the current or custom version is not
                valid semver.
            MissingPackageNameError: If a monorepo release names no package.
            PackageNotFoundError: If the package is not in the catalog.
        """
        pkg = self.repo.release_package(package_name)
        if custom_version:
            new_version = require_valid_version(custom_version)
        else:
            new_version = next_version(
                pkg.version, bump, self.repo.config.pre_release_identifier
            )
        tag_name = TagCreator(self.repo).build_tag_name(new_version, package_name)
        return VersionRelease(
            package_name=pkg.name,
            previous_version=pkg.version,
            new_version=new_version,
            tag_name=tag_name,
        )

    def execute(
        self,
        bump: BumpType = BumpType.PATCH,
        package_name: str | None = None,
        custom_version: str | None = None,
        *,
        should_push: bool = True,
        dry_run: bool = False,
    ) -> Result[VersionRelease]:
        try:
            release = self.plan(bump, package_name, custom_version)
        except ReleaseError as exc:
            return Result.fail(str(exc))

        if dry_run:
            return Result.ok(f"Dry run: {release.tag_name} would be created", release)

        step(f"Releasing {release.package_name} {release.new_version}")
        try:
            if self.repo.git.tag_exists(release.tag_name):
                raise InvalidTagError(f"Tag {release.tag_name} already exists")
            manifest = self.write_version(release, package_name)
            self.commit_version_bump(release, manifest, package_name)
        except ReleaseError as exc:
            return Result.fail(str(exc))

        tagged = TagCreator(self.repo).create_tag(
            release.new_version, package_name, should_push=should_push
        )
        if not tagged.success:
            return Result.fail(tagged.message)
        return Result.ok("Version release completed successfully", release)

    def write_version(self, release: VersionRelease, package_name: str | None) -> Path:
        pkg = self.repo.release_package(package_name)
        manifest = self.repo.write_package_version(pkg, release.new_version)
        print(f"  {pkg.name}: {release.previous_version} → {release.new_version}")
        return manifest

    def commit_version_bump(
        self, release: VersionRelease, manifest: Path, package_name: str | None
    ) -> None:
        scope = package_name if self.repo.topology is Topology.MONOREPO else None
        self.repo.git.commit_changes(
            "chore",
            f"release {release.new_version}",
            scope=scope,
            paths=[manifest.relative_to(self.repo.root).as_posix()],
        )
