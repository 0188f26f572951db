"""Version parsing and next-version suggestion.

Wraps the semver library. Suggestions follow standard semantic-versioning
increment rules; the pre-release candidate is built by hand so that a fresh
pre-release starts counting at zero (1.0.0 → 1.0.1-canary.0).
"""

from __future__ import annotations

import re
from collections.abc import Callable

import semver

from .exceptions import InvalidVersionError
from .models import BumpType, Result, VersionSuggestion

_NUMERIC = re.compile(r"^\d+$")


def is_valid_version(version: str | None) -> bool:
    """Return True for a syntactically valid semver string."""
    return bool(version) and semver.Version.is_valid(version)


def parse_version(version_str: str) -> semver.Version:
    """Parse a strict semver string.

    Raises:
        InvalidVersionError: If the string is not valid semver.
    """
    try:
        return semver.Version.parse(version_str)
    except (TypeError, ValueError) as exc:
        raise InvalidVersionError(version_str) from exc


def require_valid_version(version: str | None) -> str:
    """Return ``version`` unchanged if valid, else raise InvalidVersionError."""
    if not is_valid_version(version):
        raise InvalidVersionError(version)
    return version


def bump_patch(version_str: str) -> str:
    """Increment the patch version.

    A pre-release is released by its own patch: "1.2.3-rc.1" → "1.2.3".
    """
    return str(parse_version(version_str).next_version("patch"))


def bump_minor(version_str: str) -> str:
    """Increment the minor version and reset patch: "1.2.3" → "1.3.0"."""
    return str(parse_version(version_str).next_version("minor"))


def bump_major(version_str: str) -> str:
    """Increment the major version and reset minor/patch: "1.2.3" → "2.0.0"."""
    return str(parse_version(version_str).next_version("major"))


def bump_prerelease(version_str: str, identifier: str | None = None) -> str:
    """Compute the next pre-release version.

    Examples:
        ("1.0.0", "canary") → "1.0.1-canary.0"
        ("1.0.1-canary.0", "canary") → "1.0.1-canary.1"
        ("1.0.1-beta.2", "canary") → "1.0.1-canary.0"
        ("1.0.0", None) → "1.0.1-0"
        ("1.0.1-0", None) → "1.0.1-1"
    """
    version = parse_version(version_str).replace(build=None)
    current = version.prerelease

    if current is not None:
        if identifier is None:
            bumped = _increment_last_number(current.split("."))
            return str(version.replace(prerelease=bumped))
        if current == identifier or current.startswith(identifier + "."):
            suffix = []
            if current != identifier:
                suffix = current[len(identifier) + 1 :].split(".")
            if suffix and _NUMERIC.match(suffix[-1]):
                suffix[-1] = str(int(suffix[-1]) + 1)
            else:
                suffix.append("0")
            return str(version.replace(prerelease=".".join([identifier, *suffix])))

    base = version.next_version("patch")
    fresh = f"{identifier}.0" if identifier else "0"
    return str(base.replace(prerelease=fresh))


def next_version(
    current_version: str, bump: BumpType, pre_release_id: str | None = None
) -> str:
    """Apply one increment to ``current_version``.

    Raises:
        InvalidVersionError: If ``current_version`` is not valid semver.
    """
    if bump is BumpType.PRERELEASE:
        return bump_prerelease(current_version, pre_release_id or None)
    bumpers = {
        BumpType.PATCH: bump_patch,
        BumpType.MINOR: bump_minor,
        BumpType.MAJOR: bump_major,
    }
    return bumpers[bump](current_version)


def _increment_last_number(parts: list[str]) -> str:
    for i in range(len(parts) - 1, -1, -1):
        if _NUMERIC.match(parts[i]):
            parts[i] = str(int(parts[i]) + 1)
            return ".".join(parts)
    return ".".join([*parts, "0"])


def _attempt(compute: Callable[[], str]) -> str | None:
    try:
        return compute()
    except (InvalidVersionError, ValueError, TypeError):
        return None


def compute_suggestions(
    current_version: str, pre_release_id: str | None = None
) -> VersionSuggestion:
    """Compute the four candidate next versions.

    Each increment is attempted independently; one that fails yields None
    for its field instead of failing the whole computation.
    """
    identifier = pre_release_id or None
    return VersionSuggestion(
        patch=_attempt(lambda: bump_patch(current_version)),
        minor=_attempt(lambda: bump_minor(current_version)),
        major=_attempt(lambda: bump_major(current_version)),
        prerelease=_attempt(lambda: bump_prerelease(current_version, identifier)),
    )


def suggest_versions(
    current_version: str, pre_release_id: str | None = None
) -> Result[VersionSuggestion]:
    """Suggest the next patch, minor, major and pre-release versions.

    Always succeeds. An invalid ``current_version`` produces a suggestion
    whose four fields are all None.
    """
    suggestion = compute_suggestions(current_version, pre_release_id)
    if None in (
        suggestion.patch,
        suggestion.minor,
        suggestion.major,
        suggestion.prerelease,
    ):
        message = f"Some versions could not be computed from {current_version!r}"
    else:
        message = "Suggested versions retrieved successfully"
    return Result.ok(message, suggestion)
