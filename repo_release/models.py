"""Data models for repo-release.

These Pydantic models represent the value types passed between the
release components. All of them are request-scoped: built at the start of a
command invocation and discarded at the end.
"""

from __future__ import annotations

from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

T = TypeVar("T")

ROOT_DIRECTORY = "./"


class Topology(str, Enum):
    """Shape of the repository: one project, or a workspace of several."""

    SINGLE = "single"
    MONOREPO = "monorepo"


class VersioningStrategy(str, Enum):
    """How packages of a monorepo are versioned.

    FIXED: every package shares one version and one tag.
    INDEPENDENT: each package carries its own version and tag.
    """

    FIXED = "fixed"
    INDEPENDENT = "independent"


class BumpType(str, Enum):
    """Which part of a version a release increments."""

    PATCH = "patch"
    MINOR = "minor"
    MAJOR = "major"
    PRERELEASE = "prerelease"


class FilterReason(str, Enum):
    """Which strategy matched a commit to a package."""

    FILE_BASED = "file-based"
    SCOPE_BASED = "scope-based"
    NAME_MENTION = "name-mention"


class ReleaseConfig(BaseModel):
    """Release settings for one topology.

    Instances are immutable; build them through the factory functions in
    repo_release.config so every invocation gets its own copy.

    Attributes:
        tag_format: Tag template. Always contains "${version}"; independent
            monorepos also use "${name}".
        versioning_strategy: Monorepo versioning strategy, None for single.
        pre_release_identifier: Identifier for pre-release versions
            (e.g. "canary"), or None for a bare numeric counter.
        workspaces: Workspace glob patterns (monorepo only).
        exclude: Glob patterns removed from the workspace matches.
    """

    model_config = ConfigDict(frozen=True)

    tag_format: str
    versioning_strategy: VersioningStrategy | None = None
    pre_release_identifier: str | None = None
    workspaces: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()

    @field_validator("tag_format")
    @classmethod
    def _require_version_placeholder(cls, value: str) -> str:
        if "${version}" not in value:
            raise ValueError("Tag format must include ${version} placeholder.")
        return value

    @field_validator("pre_release_identifier")
    @classmethod
    def _blank_identifier_is_none(cls, value: str | None) -> str | None:
        return value or None


class ResolvedTopology(BaseModel):
    """Outcome of topology resolution: the shape plus its configuration."""

    model_config = ConfigDict(frozen=True)

    topology: Topology
    config: ReleaseConfig


class PackageDescriptor(BaseModel):
    """A releasable package.

    Attributes:
        name: Declared [project].name, kept verbatim.
        version: Declared [project].version.
        directory_path: Path of the package directory relative to the
            repository root, with a trailing slash ("packages/auth/").
            The root project is "./".
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    version: str = Field(min_length=1)
    directory_path: str = ROOT_DIRECTORY

    @field_validator("directory_path")
    @classmethod
    def _normalize_directory(cls, value: str) -> str:
        return normalize_directory(value)

    @property
    def path_prefix(self) -> str:
        """Prefix that repository-relative file paths of this package share."""
        return "" if self.directory_path == ROOT_DIRECTORY else self.directory_path

    @property
    def folder_name(self) -> str:
        """Final path segment of the package directory."""
        return self.path_prefix.rstrip("/").split("/")[-1]


class CommitRecord(BaseModel):
    """A commit as reported by git history."""

    model_config = ConfigDict(frozen=True)

    hash: str
    message: str
    author: str = ""
    date: str = ""

    @property
    def subject(self) -> str:
        """First line of the commit message."""
        return self.message.split("\n", 1)[0]


class FilteredCommit(CommitRecord):
    """A commit matched to a package, with the strategy that matched it."""

    filter_reason: FilterReason


class VersionSuggestion(BaseModel):
    """Candidate next versions. A field is None when it could not be computed."""

    patch: str | None = None
    minor: str | None = None
    major: str | None = None
    prerelease: str | None = None


class TagResult(BaseModel):
    """The tag a release created, or would create in a dry run."""

    tag_name: str


class ParsedTag(BaseModel):
    """Package name (None for unnamed formats) and version read from a tag."""

    name: str | None = None
    version: str


class VersionRelease(BaseModel):
    """Outcome of a bump-and-tag release.

    Attributes:
        package_name: Package whose manifest was bumped.
        previous_version: Version before the bump.
        new_version: Version written to the manifest.
        tag_name: Tag pointing at the bump commit.
    """

    package_name: str
    previous_version: str
    new_version: str
    tag_name: str


class BranchReleasePlan(BaseModel):
    """What a branch release did, or would do in a dry run."""

    branch_name: str
    package_path: str
    previous_version: str | None = None
    release_notes: str = ""


class Result(BaseModel, Generic[T]):
    """Uniform envelope returned by every public release operation.

    Callers branch on ``success``. A successful result may still carry
    partial data (see VersionSuggestion).
    """

    success: bool
    message: str
    data: T | None = None

    @classmethod
    def ok(cls, message: str, data: T | None = None) -> Result[T]:
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(cls, message: str) -> Result[T]:
        return cls(success=False, message=message)


def normalize_directory(path: str) -> str:
    """Normalize a relative directory path to end with a single slash.

    Examples:
        "packages/auth" → "packages/auth/"
        "./packages/auth/" → "packages/auth/"
        "." → "./"
    """
    cleaned = path.replace("\\", "/").strip()
    while cleaned.startswith("./"):
        cleaned = cleaned[2:]
    cleaned = cleaned.strip("/")
    if cleaned in ("", "."):
        return ROOT_DIRECTORY
    return cleaned + "/"
