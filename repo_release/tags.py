"""Tag formatting, parsing and creation.

Tag formats are small templates over two placeholders, ``${name}`` and
``${version}``. A template is validated against the versioning strategy
before anything is substituted, so a format that cannot be filled is
reported instead of producing a tag with a literal placeholder in it.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from .exceptions import (
    ConfigurationError,
    GitOperationError,
    InvalidTagError,
    InvalidVersionError,
    MissingPackageNameError,
    ReleaseError,
)
from .models import ParsedTag, Result, TagResult, Topology, VersioningStrategy
from .shell import step
from .versions import is_valid_version, require_valid_version

if TYPE_CHECKING:
    from .repository import Repository

NAME = "name"
VERSION = "version"
PLACEHOLDER_RE = re.compile(r"\$\{(\w+)\}")


class TagTemplate(BaseModel):
    """A validated tag format.

    Attributes:
        tag_format: The raw template, e.g. "${name}@${version}".
        uses_name: Whether tags name their package (independent monorepos).
    """

    model_config = ConfigDict(frozen=True)

    tag_format: str
    uses_name: bool = False

    @classmethod
    def for_strategy(
        cls,
        tag_format: str,
        topology: Topology,
        strategy: VersioningStrategy | None = None,
    ) -> TagTemplate:
        """Validate ``tag_format`` for a topology and versioning strategy.

        Every format needs ``${version}``. Independent monorepos also need
        ``${name}``; single repositories and fixed monorepos have no name to
        put there, so they must not use it.

        Raises:
            ConfigurationError: If a required placeholder is missing, an
                unusable one is present, or an unknown one is used.
        """
        placeholders = set(PLACEHOLDER_RE.findall(tag_format))
        unknown = placeholders - {NAME, VERSION}
        if unknown:
            names = ", ".join("${" + p + "}" for p in sorted(unknown))
            raise ConfigurationError(f"Unknown placeholder in tag format: {names}")
        if VERSION not in placeholders:
            raise ConfigurationError("Tag format must include ${version} placeholder.")

        independent = (
            topology is Topology.MONOREPO
            and strategy is VersioningStrategy.INDEPENDENT
        )
        if independent and NAME not in placeholders:
            raise ConfigurationError(
                "Tag format must include ${name} placeholder for independent "
                f"versioning, got {tag_format!r}"
            )
        if not independent and NAME in placeholders:
            label = "fixed versioning" if strategy else "single repositories"
            raise ConfigurationError(
                f"Tag format {tag_format!r} uses ${{name}}, which {label} cannot fill"
            )
        return cls(tag_format=tag_format, uses_name=independent)

    def render(self, version: str, name: str | None = None) -> str:
        """Substitute placeholders.

        Raises:
            InvalidVersionError: If ``version`` is not valid semver.
            MissingPackageNameError: If the template needs a name.
        """
        require_valid_version(version)
        if self.uses_name and not name:
            raise MissingPackageNameError(
                "Package name is required for independent versioning"
            )
        values = {VERSION: version, NAME: name or ""}
        return PLACEHOLDER_RE.sub(lambda m: values[m[1]], self.tag_format)

    def pattern(self, name: str | None = None) -> str:
        """Glob matching existing tags, for ``git tag --list``.

        With a name, only that package's tags match.
        """
        values = {VERSION: "*", NAME: name or "*"}
        return PLACEHOLDER_RE.sub(lambda m: values[m[1]], self.tag_format)

    def parse(self, tag_name: str) -> ParsedTag:
        """Recover package name and version from a tag.

        Raises:
            InvalidTagError: If the tag does not follow the template.
            InvalidVersionError: If the embedded version is not semver.
        """
        match = self._regex().fullmatch(tag_name)
        if not match:
            raise InvalidTagError(
                f"Tag {tag_name!r} does not match format {self.tag_format!r}"
            )
        version = match[VERSION]
        if not is_valid_version(version):
            raise InvalidVersionError(version)
        return ParsedTag(name=match[NAME] if self.uses_name else None, version=version)

    def _regex(self) -> re.Pattern[str]:
        pieces: list[str] = []
        seen: set[str] = set()
        for i, piece in enumerate(PLACEHOLDER_RE.split(self.tag_format)):
            if i % 2 == 0:
                pieces.append(re.escape(piece))
            elif piece in seen:
                pieces.append(f"(?P={piece})")
            else:
                seen.add(piece)
                pieces.append(f"(?P<{piece}>.+)")
        return re.compile("".join(pieces))


def parse_tag_name(repo: Repository, tag_name: str) -> Result[ParsedTag]:
    """Parse a tag with the repository's tag format."""
    try:
        parsed = repo.tag_template().parse(tag_name)
    except ReleaseError as exc:
        return Result.fail(str(exc))
    return Result.ok("Tag parsed successfully", parsed)


def tags_for_package(repo: Repository, package_name: str) -> Result[list[str]]:
    """List existing tags that mention a package."""
    try:
        tags = [t for t in repo.git.list_tags() if package_name in t]
    except ReleaseError as exc:
        return Result.fail(f"Failed to retrieve tags for package '{package_name}': {exc}")
    return Result.ok("Tags retrieved successfully.", tags)


class TagCreator:
    """Renders and creates release tags for a repository."""

    def __init__(self, repo: Repository) -> None:
        self.repo = repo

    def build_tag_name(self, version: str, package_name: str | None = None) -> str:
        """Render the tag name for a release without touching git.

        Raises:
            InvalidVersionError: If ``version`` is not valid semver.
            MissingPackageNameError: If independent versioning is active and
                no package name was given.
            PackageNotFoundError: If the named package is not in the catalog.
        """
        require_valid_version(version)
        template = self.repo.tag_template()
        if not template.uses_name:
            return template.render(version)
        if not package_name:
            raise MissingPackageNameError(
                "Package name is required for independent versioning"
            )
        self.repo.catalog.find(package_name)
        return template.render(version, package_name)

    def create_tag(
        self,
        version: str,
        package_name: str | None = None,
        *,
        should_push: bool = False,
        dry_run: bool = False,
    ) -> Result[TagResult]:
        """Create (and optionally push) the annotated release tag.

        In a dry run the tag name is computed and returned exactly as in a
        real run, but git is never called.
        """
        try:
            tag_name = self.build_tag_name(version, package_name)
        except ReleaseError as exc:
            return Result.fail(str(exc))

        if dry_run:
            return Result.ok("Dry run: Tag creation skipped", TagResult(tag_name=tag_name))

        step(f"Creating tag {tag_name}")
        try:
            self.repo.git.create_tag(tag_name, f"Release {tag_name}")
        except GitOperationError as exc:
            return Result.fail(str(exc))
        print(f"  {tag_name}")

        if should_push:
            try:
                self.repo.git.push_tags()
            except GitOperationError as exc:
                return Result.fail(
                    f"{exc}. Tag {tag_name} was created locally; push or delete it "
                    "manually."
                )
            print(f"  pushed to {self.repo.git.remote}")

        return Result.ok("Git tag created successfully", TagResult(tag_name=tag_name))
