"""Branch-based release preparation.

Instead of tagging directly, a release can be staged on its own branch:

    validate → plan → [dry run stops here] → create branch
    → write version → commit bump → push

Each step raises on failure and aborts the remaining ones. Completed git
operations are not undone; a failed run leaves its branch for inspection.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from .exceptions import MissingPackageNameError, ReleaseError
from .models import BranchReleasePlan, Result, Topology
from .shell import step
from .versions import require_valid_version

if TYPE_CHECKING:
    from .repository import Repository


def release_branch_name(topology: Topology, version: str, package_name: str | None) -> str:
    """Name of the release branch.

    Examples:
        (SINGLE, "1.2.0", None) → "release/v1.2.0"
        (MONOREPO, "1.2.0", "auth") → "release/auth@1.2.0"
    """
    if topology is Topology.SINGLE:
        return f"release/v{version}"
    return f"release/{package_name}@{version}"


class BranchReleaseStrategy:
    """Prepares a release branch carrying a version bump."""

    def __init__(self, repo: Repository) -> None:
        self.repo = repo

    def validate_inputs(self, version: str, package_name: str | None) -> None:
        require_valid_version(version)
        if self.repo.topology is Topology.MONOREPO and not package_name:
            raise MissingPackageNameError("Package name is required for monorepo releases")

    def plan(
        self, version: str, package_name: str | None = None, release_notes: str = ""
    ) -> BranchReleasePlan:
        """Validate inputs and compute what a release would do.

        Raises:
            InvalidVersionError: If ``version`` is not valid semver.
            MissingPackageNameError: If a monorepo release names no package.
            PackageNotFoundError: If the package is not in the catalog.
        """
        self.validate_inputs(version, package_name)
        pkg = self.repo.release_package(package_name)
        return BranchReleasePlan(
            branch_name=release_branch_name(self.repo.topology, version, package_name),
            package_path=pkg.directory_path,
            previous_version=pkg.version,
            release_notes=release_notes,
        )

    def execute(
        self,
        version: str,
        package_name: str | None = None,
        release_notes: str = "",
        *,
        should_push: bool = True,
        dry_run: bool = False,
    ) -> Result[BranchReleasePlan]:
        try:
            plan = self.plan(version, package_name, release_notes)
        except ReleaseError as exc:
            return Result.fail(str(exc))

        if dry_run:
            return Result.ok(
                f"Dry run: Release branch '{plan.branch_name}' would be created", plan
            )

        step(f"Preparing release branch {plan.branch_name}")
        try:
            self.create_release_branch(plan)
        except ReleaseError as exc:
            return Result.fail(str(exc))

        try:
            manifest = self.update_package_version(plan, version, package_name)
            self.commit_version_bump(manifest, version, package_name)
            if should_push:
                self.push_release_branch(plan)
        except ReleaseError as exc:
            return Result.fail(self.leave_branch_for_inspection(plan, exc))

        return Result.ok(f"Release branch '{plan.branch_name}' created successfully", plan)

    def create_release_branch(self, plan: BranchReleasePlan) -> None:
        self.repo.git.create_branch(plan.branch_name)
        print(f"  created {plan.branch_name}")

    def update_package_version(
        self, plan: BranchReleasePlan, version: str, package_name: str | None
    ) -> Path:
        """Write ``version`` into the package manifest, keeping its formatting."""
        pkg = self.repo.release_package(package_name)
        manifest = self.repo.write_package_version(pkg, version)
        print(f"  {pkg.name}: {plan.previous_version} → {version}")
        return manifest

    def commit_version_bump(
        self, manifest: Path, version: str, package_name: str | None
    ) -> None:
        scope = package_name if self.repo.topology is Topology.MONOREPO else None
        self.repo.git.commit_changes(
            "chore",
            f"bump version to {version}",
            scope=scope,
            paths=[manifest.relative_to(self.repo.root).as_posix()],
        )
        print(f"  committed version bump to {version}")

    def push_release_branch(self, plan: BranchReleasePlan) -> None:
        self.repo.git.push_branch(plan.branch_name)
        print(f"  pushed {plan.branch_name} to {self.repo.git.remote}")

    def leave_branch_for_inspection(
        self, plan: BranchReleasePlan, exc: ReleaseError
    ) -> str:
        """Compensating action for a failure after the branch exists.

        Nothing is rolled back. The branch and any commits on it stay in
        place, and the returned message tells the user where to look.
        """
        return (
            f"{exc}. Branch '{plan.branch_name}' was left in place for manual "
            "inspection."
        )
