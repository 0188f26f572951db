"""Error taxonomy for repo-release.

Components raise these internally. Every public operation catches
ReleaseError at its outermost layer and reports it through a failed
Result envelope instead of letting it cross the boundary.
"""

from __future__ import annotations


class ReleaseError(Exception):
    """Base class for every error the release engine reports."""


class ConfigurationError(ReleaseError):
    """Missing or invalid manifest or release configuration."""


class InvalidVersionError(ReleaseError):
    """A version string is not valid semantic versioning."""

    def __init__(self, version: str | None) -> None:
        super().__init__(f"Invalid version format: {version}")
        self.version = version


class InvalidTagError(ReleaseError):
    """A tag name does not follow the configured tag format."""


class MissingPackageNameError(ReleaseError):
    """A package name is required by the active topology or strategy."""


class CatalogError(ReleaseError):
    """Workspace package lookup failed."""


class NoPackagesFoundError(CatalogError):
    """Workspace globs matched no package with a valid manifest."""


class PackageNotFoundError(CatalogError):
    """No package in the catalog carries the requested name."""

    def __init__(self, name: str) -> None:
        super().__init__(
            f'Package "{name}" not found. Check the workspace globs and the '
            "package name spelling."
        )
        self.name = name


class GitOperationError(ReleaseError):
    """A git command failed.

    Attributes:
        stage: Short name of the operation that failed (e.g. "create tag").
        stderr: Captured stderr of the git process, if any.
    """

    def __init__(self, stage: str, detail: str = "", stderr: str = "") -> None:
        message = f"Failed to {stage}"
        if detail:
            message += f": {detail}"
        super().__init__(message)
        self.stage = stage
        self.stderr = stderr
