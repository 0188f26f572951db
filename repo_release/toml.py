"""Manifest reading and writing utilities.

Uses tomlkit to preserve formatting and comments when modifying
pyproject.toml files, so version bumps stay small, readable diffs.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.exceptions import TOMLKitError

from .exceptions import ConfigurationError

MANIFEST_NAME = "pyproject.toml"
TOOL_TABLE = "repo-release"


def manifest_path(directory: Path) -> Path:
    """Return the pyproject.toml path inside a directory."""
    return directory / MANIFEST_NAME


def manifest_exists(path: Path) -> bool:
    return path.is_file()


def read_manifest(path: Path) -> tomlkit.TOMLDocument:
    """Load and parse a pyproject.toml file.

    Returns a TOMLDocument that preserves formatting when modified and saved.

    Raises:
        ConfigurationError: If the file is missing, unreadable or not TOML.
    """
    if not manifest_exists(path):
        raise ConfigurationError(f"No {MANIFEST_NAME} found at {path}")
    try:
        return tomlkit.parse(path.read_text())
    except (OSError, TOMLKitError) as exc:
        raise ConfigurationError(f"Failed to read {path}: {exc}") from exc


def write_manifest(path: Path, doc: tomlkit.TOMLDocument) -> None:
    """Save a TOMLDocument back to disk, preserving original formatting."""
    try:
        path.write_text(tomlkit.dumps(doc))
    except OSError as exc:
        raise ConfigurationError(f"Failed to write {path}: {exc}") from exc


def get_project_name(doc: tomlkit.TOMLDocument) -> str | None:
    """Extract [project].name exactly as declared."""
    name = doc.get("project", {}).get("name")
    return str(name) if name is not None else None


def get_project_version(doc: tomlkit.TOMLDocument) -> str | None:
    """Extract [project].version, or None for missing/dynamic versions."""
    version = doc.get("project", {}).get("version")
    return str(version) if version is not None else None


def set_project_version(doc: tomlkit.TOMLDocument, version: str) -> None:
    """Set [project].version in place.

    Raises:
        ConfigurationError: If the document has no [project] table.
    """
    project = doc.get("project")
    if project is None:
        raise ConfigurationError("No [project] table to update the version in")
    project["version"] = version


def get_workspace_member_globs(doc: tomlkit.TOMLDocument) -> list[str]:
    """Extract workspace member glob patterns from [tool.uv.workspace].

    These patterns (e.g., "packages/*", "libs/*") define which directories
    contain workspace packages. Returns an empty list when no workspace is
    declared.
    """
    members = doc.get("tool", {}).get("uv", {}).get("workspace", {}).get("members")
    return [str(m) for m in members] if members else []


def get_workspace_exclude_globs(doc: tomlkit.TOMLDocument) -> list[str]:
    """Extract [tool.uv.workspace].exclude patterns."""
    exclude = doc.get("tool", {}).get("uv", {}).get("workspace", {}).get("exclude")
    return [str(e) for e in exclude] if exclude else []


def get_release_table(doc: tomlkit.TOMLDocument) -> dict[str, Any]:
    """Return [tool.repo-release] as plain Python values (empty if absent)."""
    table = doc.get("tool", {}).get(TOOL_TABLE)
    if table is None:
        return {}
    if not isinstance(table, dict):
        raise ConfigurationError(f"[tool.{TOOL_TABLE}] must be a table")
    return table.unwrap() if hasattr(table, "unwrap") else dict(table)
