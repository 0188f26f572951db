"""Conventional commit grammar.

Parses subjects of the form ``type(scope)!: description`` and groups commit
records by type for release notes. Only the recognised types below count as
conventional; any other subject is bucketed as "other".
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import TypeVar

from pydantic import BaseModel

from .models import CommitRecord

# Release-note section order: user-facing changes before internal ones.
COMMIT_TYPES = (
    "feat",
    "fix",
    "perf",
    "refactor",
    "docs",
    "style",
    "test",
    "chore",
    "build",
    "ci",
)
OTHER = "other"
SECTION_ORDER = (*COMMIT_TYPES, OTHER)

_SUBJECT_RE = re.compile(
    rf"^(?P<type>{'|'.join(COMMIT_TYPES)})"
    r"(?:\((?P<scope>[^)]*)\))?"
    r"(?P<breaking>!)?:\s*"
    r"(?P<description>.*)$"
)

C = TypeVar("C", bound=CommitRecord)


class ConventionalSubject(BaseModel):
    type: str
    scope: str | None = None
    breaking: bool = False
    description: str


def parse_subject(message: str) -> ConventionalSubject | None:
    """Parse the first line of a commit message.

    Returns None when the subject does not follow the convention.

    Examples:
        "fix(auth): handle null token" → type="fix", scope="auth"
        "feat!: drop python 3.9" → type="feat", breaking=True
        "Merge branch 'main'" → None
    """
    subject = message.split("\n", 1)[0]
    match = _SUBJECT_RE.match(subject)
    if not match:
        return None
    return ConventionalSubject(
        type=match["type"],
        scope=match["scope"] or None,
        breaking=bool(match["breaking"]),
        description=match["description"],
    )


def commit_type(message: str) -> str:
    """Return the conventional type of a message, or "other"."""
    parsed = parse_subject(message)
    return parsed.type if parsed else OTHER


def strip_prefix(message: str) -> str:
    """Return the subject line without its ``type(scope):`` prefix."""
    parsed = parse_subject(message)
    if parsed is None:
        return message.split("\n", 1)[0]
    return parsed.description


def group_commits_by_type(commits: Iterable[C]) -> dict[str, list[C]]:
    """Group commits by conventional type, keeping input order within groups."""
    groups: dict[str, list[C]] = {}
    for commit in commits:
        groups.setdefault(commit_type(commit.message), []).append(commit)
    return groups


def format_commit_message(
    kind: str,
    message: str,
    scope: str | None = None,
    body: str | None = None,
) -> str:
    """Build a conventional commit message.

    Examples:
        ("chore", "bump version to 1.2.0", "auth") →
            "chore(auth): bump version to 1.2.0"
    """
    header = f"{kind}({scope})" if scope else kind
    text = f"{header}: {message}"
    if body:
        text += f"\n\n{body}"
    return text
