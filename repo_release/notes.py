"""Release notes generation.

Collects the commits since the previous release tag, groups them by
conventional-commit type and renders a Markdown document. Sections always
appear in SECTION_ORDER, user-facing changes first, and empty sections are
left out.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

import semver

from .commits import SECTION_ORDER, group_commits_by_type, strip_prefix
from .exceptions import MissingPackageNameError, ReleaseError
from .filtering import CommitFilter
from .models import CommitRecord, Result
from .versions import parse_version

if TYPE_CHECKING:
    from .repository import Repository
    from .tags import TagTemplate

SECTION_LABELS = {
    "feat": "🚀 Features",
    "fix": "🐛 Bug Fixes",
    "perf": "⚡ Performance Improvements",
    "refactor": "♻️ Code Refactoring",
    "docs": "📚 Documentation",
    "style": "💄 Styles",
    "test": "🧪 Tests",
    "chore": "🔧 Chores",
    "build": "📦 Build System",
    "ci": "🤖 CI/CD",
    "other": "📝 Other Changes",
}


def render_release_notes(tag_name: str, commits: Sequence[CommitRecord]) -> str:
    """Render grouped commits as Markdown.

    Example:
        ## Changes in v1.1.0

        ### 🚀 Features

        - add login
    """
    groups = group_commits_by_type(commits)
    lines = [f"## Changes in {tag_name}", ""]
    for kind in SECTION_ORDER:
        entries = groups.get(kind)
        if not entries:
            continue
        lines += [f"### {SECTION_LABELS[kind]}", ""]
        lines += [f"- {strip_prefix(c.message)}" for c in entries]
        lines.append("")
    return "\n".join(lines).rstrip() + "\n"


def previous_tag(
    template: TagTemplate, tag_name: str, candidates: Iterable[str]
) -> str | None:
    """The highest tag in ``candidates`` whose version is below ``tag_name``'s.

    Versions are compared with semver precedence, so 1.0.1 ranks above
    1.0.1-canary.0. Candidates that do not follow the template are skipped.

    Raises:
        InvalidTagError: If ``tag_name`` itself does not follow the template.
    """
    current = parse_version(template.parse(tag_name).version)
    best: tuple[semver.Version, str] | None = None
    for candidate in candidates:
        try:
            version = parse_version(template.parse(candidate).version)
        except ReleaseError:
            continue
        if version < current and (best is None or version > best[0]):
            best = (version, candidate)
    return best[1] if best else None


class ReleaseNotesGenerator:
    """Builds release notes for a tag of a repository."""

    def __init__(self, repo: Repository) -> None:
        self.repo = repo

    def collect_commits(
        self, tag_name: str, package_name: str | None = None
    ) -> list[CommitRecord]:
        """Commits that belong in the notes for ``tag_name``.

        History is read from the previous tag of the same series (see
        previous_tag) up to ``tag_name``, or HEAD if the tag does not exist
        yet. With no earlier tag the whole history is used. Independent
        monorepos keep only the commits attributed to ``package_name``.

        Raises:
            MissingPackageNameError: If independent versioning is active and
                no package name was given.
            InvalidTagError: If ``tag_name`` does not follow the tag format.
            PackageNotFoundError: If the named package is not in the catalog.
            GitOperationError: If history cannot be read.
        """
        template = self.repo.tag_template()
        if template.uses_name and not package_name:
            raise MissingPackageNameError(
                "Package name is required for independent versioning"
            )
        git = self.repo.git

        pattern = template.pattern(package_name if template.uses_name else None)
        earlier = previous_tag(template, tag_name, git.list_tags(pattern))
        until = tag_name if git.tag_exists(tag_name) else "HEAD"
        if earlier:
            commits = git.get_commits_since_tag(earlier, until=until)
        else:
            commits = git.get_commits(until=until)

        if template.uses_name:
            return CommitFilter.for_repository(self.repo).select(package_name, commits)
        return commits

    def generate(self, tag_name: str, package_name: str | None = None) -> Result[str]:
        try:
            commits = self.collect_commits(tag_name, package_name)
        except ReleaseError as exc:
            return Result.fail(f"Failed to generate release notes: {exc}")
        if not commits:
            return Result.fail(f"No commits found for release notes of {tag_name}")
        return Result.ok(
            "Release notes generated successfully",
            render_release_notes(tag_name, commits),
        )
