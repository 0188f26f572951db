"""Release configuration.

Default configurations are produced by factory functions rather than kept
as module-level objects, so each command invocation works on a fresh,
immutable ReleaseConfig.

User settings live in the root pyproject.toml:

    [tool.repo-release]
    tag-format = "${name}@${version}"
    versioning-strategy = "independent"
    pre-release-identifier = "canary"
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from .exceptions import ConfigurationError
from .models import ReleaseConfig, Topology, VersioningStrategy

DEFAULT_PRE_RELEASE_IDENTIFIER = "canary"
DEFAULT_WORKSPACES = ("packages/*",)
SINGLE_TAG_FORMAT = "v${version}"
INDEPENDENT_TAG_FORMAT = "${name}@${version}"

# pyproject keys → ReleaseConfig fields
_KEYS = {
    "tag-format": "tag_format",
    "versioning-strategy": "versioning_strategy",
    "pre-release-identifier": "pre_release_identifier",
    "workspaces": "workspaces",
    "exclude": "exclude",
}
_MARKER_KEYS = {"repo-type"}


def default_single_config() -> ReleaseConfig:
    """Configuration for a repository holding one project."""
    return ReleaseConfig(
        tag_format=SINGLE_TAG_FORMAT,
        pre_release_identifier=DEFAULT_PRE_RELEASE_IDENTIFIER,
    )


def default_monorepo_config(
    strategy: VersioningStrategy = VersioningStrategy.INDEPENDENT,
) -> ReleaseConfig:
    """Configuration for a workspace of packages.

    Fixed versioning shares one "v"-prefixed tag across packages;
    independent versioning names the package in every tag.
    """
    tag_format = (
        INDEPENDENT_TAG_FORMAT
        if strategy is VersioningStrategy.INDEPENDENT
        else SINGLE_TAG_FORMAT
    )
    return ReleaseConfig(
        tag_format=tag_format,
        versioning_strategy=strategy,
        pre_release_identifier=DEFAULT_PRE_RELEASE_IDENTIFIER,
        workspaces=DEFAULT_WORKSPACES,
    )


def load_release_config(
    topology: Topology,
    table: dict[str, Any],
    workspace_globs: list[str] | None = None,
    exclude_globs: list[str] | None = None,
) -> ReleaseConfig:
    """Merge a [tool.repo-release] table over the topology's defaults.

    Args:
        topology: Resolved repository topology.
        table: Contents of [tool.repo-release] (may be empty).
        workspace_globs: Members declared by [tool.uv.workspace]; they take
            precedence over the table's "workspaces" key.
        exclude_globs: Excludes declared by [tool.uv.workspace].

    Raises:
        ConfigurationError: On unknown keys or invalid values.
    """
    unknown = set(table) - set(_KEYS) - _MARKER_KEYS
    if unknown:
        raise ConfigurationError(
            f"Unknown [tool.repo-release] keys: {', '.join(sorted(unknown))}"
        )

    overrides = {_KEYS[key]: value for key, value in table.items() if key in _KEYS}

    for field in ("workspaces", "exclude"):
        if field in overrides:
            if not isinstance(overrides[field], (list, tuple)):
                raise ConfigurationError(f"{field} must be a list of glob patterns")
            overrides[field] = tuple(overrides[field])

    if topology is Topology.SINGLE:
        if "versioning_strategy" in overrides:
            raise ConfigurationError(
                "versioning-strategy only applies to monorepo repositories"
            )
        base = default_single_config()
        overrides.pop("workspaces", None)
        overrides.pop("exclude", None)
    else:
        strategy = _parse_strategy(overrides.get("versioning_strategy"))
        base = default_monorepo_config(strategy)
        overrides["versioning_strategy"] = strategy
        if workspace_globs:
            overrides["workspaces"] = tuple(workspace_globs)
        if exclude_globs:
            overrides["exclude"] = (*overrides.get("exclude", ()), *exclude_globs)

    try:
        return ReleaseConfig(**(base.model_dump() | overrides))
    except ValidationError as exc:
        raise ConfigurationError(
            f"Configuration validation failed: {_first_error(exc)}"
        ) from exc


def _parse_strategy(value: Any) -> VersioningStrategy:
    if value is None:
        return VersioningStrategy.INDEPENDENT
    try:
        return VersioningStrategy(value)
    except ValueError as exc:
        raise ConfigurationError(
            "Versioning strategy must be either 'fixed' or 'independent', "
            f"got {value!r}"
        ) from exc


def _first_error(exc: ValidationError) -> str:
    error = exc.errors()[0]
    location = ".".join(str(part) for part in error["loc"])
    return f"{location}: {error['msg']}" if location else error["msg"]
