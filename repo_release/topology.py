"""Repository topology resolution.

Decides whether the working tree holds a single project or a monorepo by
inspecting the root pyproject.toml, and loads the matching release
configuration. Resolution is a pure function of the manifest content.
"""

from __future__ import annotations

from pathlib import Path

import tomlkit

from .config import load_release_config
from .exceptions import ConfigurationError, ReleaseError
from .models import ResolvedTopology, Result, Topology
from .toml import (
    TOOL_TABLE,
    get_release_table,
    get_workspace_exclude_globs,
    get_workspace_member_globs,
    manifest_path,
    read_manifest,
)


def detect_topology(doc: tomlkit.TOMLDocument) -> Topology:
    """Determine the topology declared by a root manifest.

    A monorepo is any manifest that declares workspace members, either in
    [tool.uv.workspace] or [tool.repo-release].workspaces, or that carries
    the explicit marker repo-type = "monorepo". Everything else is single.

    Raises:
        ConfigurationError: If repo-type is unknown, or says "single" while
            workspace members are declared.
    """
    table = get_release_table(doc)
    marker = table.get("repo-type")
    if marker is not None and marker not in {t.value for t in Topology}:
        raise ConfigurationError(
            f"Repository type must be either 'monorepo' or 'single', got {marker!r}"
        )

    has_workspaces = bool(get_workspace_member_globs(doc) or table.get("workspaces"))
    if marker == Topology.SINGLE.value and has_workspaces:
        raise ConfigurationError(
            f'[tool.{TOOL_TABLE}] declares repo-type = "single" but the manifest '
            "declares workspace members"
        )
    if marker == Topology.MONOREPO.value or has_workspaces:
        return Topology.MONOREPO
    return Topology.SINGLE


def resolve_topology(root: Path, expected: Topology | None = None) -> ResolvedTopology:
    """Read the root manifest and resolve topology plus release config.

    Args:
        root: Repository root containing pyproject.toml.
        expected: Topology the calling operation requires, if any.

    Raises:
        ConfigurationError: If the manifest is missing or invalid, or the
            resolved topology differs from ``expected``.
    """
    doc = read_manifest(manifest_path(root))
    topology = detect_topology(doc)
    if expected is not None and topology is not expected:
        raise ConfigurationError(
            f"This operation requires a {expected.value} repository, "
            f"but {root} is a {topology.value} repository"
        )

    config = load_release_config(
        topology,
        get_release_table(doc),
        workspace_globs=get_workspace_member_globs(doc),
        exclude_globs=get_workspace_exclude_globs(doc),
    )
    return ResolvedTopology(topology=topology, config=config)


class TopologyResolver:
    """Resolves the topology of the repository rooted at ``root``."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = root if root is not None else Path.cwd()

    def resolve(self, expected: Topology | None = None) -> Result[ResolvedTopology]:
        try:
            resolved = resolve_topology(self.root, expected)
        except ReleaseError as exc:
            return Result.fail(str(exc))
        monorepo = resolved.topology is Topology.MONOREPO
        label = "Monorepo" if monorepo else "Single repository"
        return Result.ok(f"{label} detected", resolved)
