"""Workspace package discovery.

Maps every package of the repository to its name, version and directory.
For a monorepo the packages are found by expanding the workspace globs;
a single repository is its own, only package.
"""

from __future__ import annotations

import glob
from pathlib import Path

from packaging.utils import canonicalize_name
from pydantic import ValidationError

from .exceptions import (
    ConfigurationError,
    NoPackagesFoundError,
    PackageNotFoundError,
    ReleaseError,
)
from .models import (
    ROOT_DIRECTORY,
    PackageDescriptor,
    ResolvedTopology,
    Result,
    Topology,
)
from .toml import get_project_name, get_project_version, manifest_path, read_manifest

IGNORED_DIRS = frozenset(
    {
        "node_modules",
        "dist",
        "build",
        ".git",
        ".vscode",
        "logs",
        "temp",
        "tmp",
        ".turbo",
        "__pycache__",
        ".venv",
        ".tox",
        ".mypy_cache",
        ".pytest_cache",
        ".ruff_cache",
    }
)


def expand_workspace_globs(
    root: Path, patterns: tuple[str, ...], exclude: tuple[str, ...] = ()
) -> list[Path]:
    """Expand workspace glob patterns into candidate package directories.

    Matches are sorted per pattern for deterministic output, deduplicated,
    and stripped of anything under an ignored directory or matched by an
    exclude pattern.
    """
    excluded: set[Path] = set()
    for pattern in exclude:
        excluded.update(Path(m).resolve() for m in glob.glob(str(root / pattern)))

    dirs: list[Path] = []
    seen: set[Path] = set()
    for pattern in patterns:
        for match in sorted(glob.glob(str(root / pattern))):
            p = Path(match)
            if not p.is_dir():
                continue
            resolved = p.resolve()
            if resolved in seen or resolved in excluded:
                continue
            if IGNORED_DIRS.intersection(p.relative_to(root).parts):
                continue
            seen.add(resolved)
            dirs.append(p)
    return dirs


def read_package(root: Path, directory: Path) -> PackageDescriptor:
    """Build a descriptor from the pyproject.toml inside ``directory``.

    Raises:
        ConfigurationError: If the manifest is missing or lacks a valid
            [project] name and version.
    """
    doc = read_manifest(manifest_path(directory))
    relative = directory.relative_to(root).as_posix()
    try:
        return PackageDescriptor(
            name=get_project_name(doc) or "",
            version=get_project_version(doc) or "",
            directory_path=relative,
        )
    except ValidationError as exc:
        raise ConfigurationError(
            f"{manifest_path(directory)} needs a [project] name and version"
        ) from exc


class PackageCatalog:
    """Package lookup for one repository.

    Discovery runs once per catalog instance; build a new catalog for each
    command invocation.
    """

    def __init__(self, root: Path, resolved: ResolvedTopology) -> None:
        self.root = root
        self.topology = resolved.topology
        self.config = resolved.config
        self._packages: list[PackageDescriptor] | None = None

    def discover(self) -> list[PackageDescriptor]:
        """Return every package, discovering them on first use.

        Raises:
            NoPackagesFoundError: If no package has a valid manifest.
            ConfigurationError: If two packages share a name, or the root
                project of a single repository is invalid.
        """
        if self._packages is None:
            if self.topology is Topology.SINGLE:
                packages = [read_package(self.root, self.root)]
            else:
                packages = self._discover_workspace()
            self._packages = packages
        return list(self._packages)

    def _discover_workspace(self) -> list[PackageDescriptor]:
        packages: list[PackageDescriptor] = []
        for directory in expand_workspace_globs(
            self.root, self.config.workspaces, self.config.exclude
        ):
            if not manifest_path(directory).exists():
                continue
            try:
                packages.append(read_package(self.root, directory))
            except ConfigurationError as exc:
                print(f"  Warning: skipping {directory.relative_to(self.root)}: {exc}")

        if not packages:
            raise NoPackagesFoundError(
                "No packages found in the monorepo workspaces "
                f"({', '.join(self.config.workspaces)})."
            )

        owners: dict[str, PackageDescriptor] = {}
        for pkg in packages:
            key = canonicalize_name(pkg.name)
            if key in owners:
                raise ConfigurationError(
                    f'Package name "{pkg.name}" ({pkg.directory_path}) clashes with '
                    f'"{owners[key].name}" ({owners[key].directory_path})'
                )
            owners[key] = pkg
        return packages

    def find(self, name: str) -> PackageDescriptor:
        """Return the package declared as ``name`` (exact, case-sensitive).

        Raises:
            PackageNotFoundError: If no package carries that name.
        """
        for pkg in self.discover():
            if pkg.name == name:
                return pkg
        raise PackageNotFoundError(name)

    def list_packages(self) -> Result[list[PackageDescriptor]]:
        try:
            packages = self.discover()
        except ReleaseError as exc:
            return Result.fail(f"Failed to load packages: {exc}")
        return Result.ok("Packages loaded successfully.", packages)

    def get_by_name(self, name: str) -> Result[PackageDescriptor]:
        try:
            pkg = self.find(name)
        except ReleaseError as exc:
            return Result.fail(f"Failed to load package: {exc}")
        return Result.ok("Package loaded successfully.", pkg)

    def get_path(self, name: str) -> Result[str]:
        try:
            pkg = self.find(name)
        except ReleaseError as exc:
            return Result.fail(f"Failed to get package path: {exc}")
        return Result.ok("Package path found successfully.", pkg.directory_path)

    def manifest_for(self, pkg: PackageDescriptor) -> Path:
        """Absolute path of a package's pyproject.toml."""
        if pkg.directory_path == ROOT_DIRECTORY:
            return manifest_path(self.root)
        return manifest_path(self.root / pkg.directory_path)
