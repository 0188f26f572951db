"""Request-scoped repository context.

A Repository bundles everything one command invocation needs: the resolved
topology and configuration, the package catalog and the git client. Build
one per invocation with Repository.open(); nothing here is cached across
invocations.
"""

from __future__ import annotations

from pathlib import Path

from .catalog import PackageCatalog
from .exceptions import MissingPackageNameError, ReleaseError
from .git import GitClient
from .models import (
    PackageDescriptor,
    ReleaseConfig,
    ResolvedTopology,
    Result,
    Topology,
    VersioningStrategy,
    VersionSuggestion,
)
from .tags import TagTemplate
from .toml import read_manifest, set_project_version, write_manifest
from .topology import resolve_topology
from .versions import suggest_versions


class Repository:
    def __init__(
        self,
        root: Path,
        resolved: ResolvedTopology,
        git: GitClient | None = None,
    ) -> None:
        self.root = root
        self.topology: Topology = resolved.topology
        self.config: ReleaseConfig = resolved.config
        self.catalog = PackageCatalog(root, resolved)
        self.git = git if git is not None else GitClient(root)

    @classmethod
    def open(
        cls,
        root: Path | None = None,
        git: GitClient | None = None,
        expected: Topology | None = None,
    ) -> Repository:
        """Resolve the repository at ``root`` (default: current directory).

        The tag format is validated here so that a format the versioning
        strategy cannot fill is reported before any command runs.

        Raises:
            ConfigurationError: If the root manifest or release
                configuration is missing or invalid.
        """
        root = (root if root is not None else Path.cwd()).resolve()
        repo = cls(root, resolve_topology(root, expected), git)
        repo.tag_template()
        return repo

    @property
    def is_independent(self) -> bool:
        return (
            self.topology is Topology.MONOREPO
            and self.config.versioning_strategy is VersioningStrategy.INDEPENDENT
        )

    def tag_template(self) -> TagTemplate:
        return TagTemplate.for_strategy(
            self.config.tag_format, self.topology, self.config.versioning_strategy
        )

    def release_package(self, package_name: str | None = None) -> PackageDescriptor:
        """The package a release command acts on.

        A single repository is its own package. In a monorepo the package
        must be named.

        Raises:
            MissingPackageNameError: If a monorepo release names no package.
            PackageNotFoundError: If the package is not in the catalog.
        """
        if self.topology is Topology.SINGLE:
            return self.catalog.discover()[0]
        if not package_name:
            raise MissingPackageNameError("Package name is required for monorepo releases")
        return self.catalog.find(package_name)

    def write_package_version(self, pkg: PackageDescriptor, version: str) -> Path:
        """Write ``version`` into the package manifest, keeping its formatting.

        Returns the manifest path.
        """
        manifest = self.catalog.manifest_for(pkg)
        doc = read_manifest(manifest)
        set_project_version(doc, version)
        write_manifest(manifest, doc)
        return manifest

    def suggest_versions(
        self, package_name: str | None = None
    ) -> Result[VersionSuggestion]:
        """Suggest next versions for a package from its current version."""
        try:
            pkg = self.release_package(package_name)
        except ReleaseError as exc:
            return Result.fail(str(exc))
        return suggest_versions(pkg.version, self.config.pre_release_identifier)


def open_repository(
    root: Path | None = None,
    git: GitClient | None = None,
    expected: Topology | None = None,
) -> Result[Repository]:
    """Envelope form of Repository.open()."""
    try:
        repo = Repository.open(root, git, expected)
    except ReleaseError as exc:
        return Result.fail(str(exc))
    label = "Monorepo" if repo.topology is Topology.MONOREPO else "Single repository"
    return Result.ok(f"{label} detected", repo)
