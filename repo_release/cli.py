"""CLI entry point for repo-release."""

from __future__ import annotations

from pathlib import Path
from typing import TypeVar

import click

from repo_release.branch import BranchReleaseStrategy
from repo_release.exceptions import ReleaseError
from repo_release.filtering import CommitFilter
from repo_release.models import BumpType, Result
from repo_release.notes import ReleaseNotesGenerator
from repo_release.release import VersionReleaser
from repo_release.repository import Repository, open_repository
from repo_release.shell import step
from repo_release.tags import TagCreator

T = TypeVar("T")


def unwrap(result: Result[T]) -> T:
    """Return the data of a successful result.

    Raises:
        click.ClickException: If the result failed, with its message.
    """
    if not result.success:
        raise click.ClickException(result.message)
    return result.data


@click.group()
@click.version_option(package_name="repo-release")
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Repository root. Defaults to the current directory.",
)
@click.pass_context
def cli(ctx: click.Context, root: Path | None) -> None:
    """Version, tag and release single projects and uv workspaces."""
    ctx.obj = root


def _open(ctx: click.Context) -> Repository:
    return unwrap(open_repository(ctx.obj))


@cli.command()
@click.pass_context
def info(ctx: click.Context) -> None:
    """Show the repository topology and its packages."""
    repo = _open(ctx)
    step(f"{repo.topology.value.capitalize()} repository at {repo.root}")
    click.echo(f"  tag format: {repo.config.tag_format}")
    if repo.config.versioning_strategy:
        click.echo(f"  versioning: {repo.config.versioning_strategy.value}")
    click.echo(f"  pre-release identifier: {repo.config.pre_release_identifier or '-'}")

    packages = unwrap(repo.catalog.list_packages())
    step(f"Packages ({len(packages)})")
    for pkg in packages:
        click.echo(f"  {pkg.name} {pkg.version} ({pkg.directory_path})")


@cli.command()
@click.argument("package", required=False)
@click.pass_context
def suggest(ctx: click.Context, package: str | None) -> None:
    """Suggest next versions for PACKAGE (monorepo) or the project."""
    repo = _open(ctx)
    result = repo.suggest_versions(package)
    suggestion = unwrap(result)
    click.echo(result.message)
    for field in ("patch", "minor", "major", "prerelease"):
        click.echo(f"  {field:<10} {getattr(suggestion, field) or '-'}")


@cli.command(name="filter")
@click.argument("package")
@click.option("--since", help="Only consider commits after this tag.")
@click.pass_context
def filter_commits(ctx: click.Context, package: str, since: str | None) -> None:
    """List the commits attributed to PACKAGE."""
    repo = _open(ctx)
    try:
        history = repo.git.get_commits_since_tag(since) if since else repo.git.get_commits()
    except ReleaseError as exc:
        raise click.ClickException(str(exc)) from exc
    result = CommitFilter.for_repository(repo).filter_for_package(package, history)
    commits = unwrap(result)
    click.echo(result.message)
    for commit in commits:
        click.echo(f"  {commit.hash[:7]} [{commit.filter_reason.value}] {commit.subject}")


@cli.command()
@click.argument("version")
@click.option("--package", "package_name", help="Package to tag (independent monorepos).")
@click.option("--push", is_flag=True, help="Push tags to the remote.")
@click.option("--dry-run", is_flag=True, help="Compute the tag without creating it.")
@click.pass_context
def tag(
    ctx: click.Context,
    version: str,
    package_name: str | None,
    push: bool,
    dry_run: bool,
) -> None:
    """Create the release tag for VERSION."""
    repo = _open(ctx)
    result = TagCreator(repo).create_tag(
        version, package_name, should_push=push, dry_run=dry_run
    )
    created = unwrap(result)
    click.echo(f"✓ {result.message}: {created.tag_name}")


@cli.command()
@click.option(
    "--type",
    "bump",
    type=click.Choice([b.value for b in BumpType]),
    default=BumpType.PATCH.value,
    show_default=True,
    help="Which part of the version to increment.",
)
@click.option("--custom", "custom_version", help="Release this exact version instead.")
@click.option("--package", "package_name", help="Package to release (monorepo).")
@click.option("--push/--no-push", default=True, show_default=True, help="Push the tag.")
@click.option("--dry-run", is_flag=True, help="Show the new version and tag only.")
@click.pass_context
def version(
    ctx: click.Context,
    bump: str,
    custom_version: str | None,
    package_name: str | None,
    push: bool,
    dry_run: bool,
) -> None:
    """Bump the version, commit it and tag the commit."""
    repo = _open(ctx)
    result = VersionReleaser(repo).execute(
        BumpType(bump),
        package_name,
        custom_version,
        should_push=push,
        dry_run=dry_run,
    )
    release = unwrap(result)
    click.echo(f"✓ {result.message}")
    click.echo(
        f"  {release.package_name}: {release.previous_version} → {release.new_version}"
    )
    click.echo(f"  tag: {release.tag_name}")


@cli.command()
@click.argument("tag_name")
@click.option("--package", "package_name", help="Package the notes are for.")
@click.option(
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the notes to a file instead of stdout.",
)
@click.pass_context
def notes(
    ctx: click.Context, tag_name: str, package_name: str | None, output: Path | None
) -> None:
    """Generate Markdown release notes for TAG_NAME."""
    repo = _open(ctx)
    document = unwrap(ReleaseNotesGenerator(repo).generate(tag_name, package_name))
    if output:
        output.write_text(document)
        click.echo(f"✓ Wrote release notes to {output}")
    else:
        click.echo(document, nl=False)


@cli.command(name="prepare-release")
@click.argument("version")
@click.option("--package", "package_name", help="Package to release (monorepo).")
@click.option("--push/--no-push", default=True, show_default=True, help="Push the branch.")
@click.option("--notes", "with_notes", is_flag=True, help="Attach generated release notes.")
@click.option("--dry-run", is_flag=True, help="Show the plan without touching git.")
@click.pass_context
def prepare_release(
    ctx: click.Context,
    version: str,
    package_name: str | None,
    push: bool,
    with_notes: bool,
    dry_run: bool,
) -> None:
    """Create a release branch that bumps the version to VERSION."""
    repo = _open(ctx)
    release_notes = ""
    if with_notes:
        try:
            tag_name = TagCreator(repo).build_tag_name(version, package_name)
        except ReleaseError as exc:
            raise click.ClickException(str(exc)) from exc
        release_notes = unwrap(ReleaseNotesGenerator(repo).generate(tag_name, package_name))

    result = BranchReleaseStrategy(repo).execute(
        version, package_name, release_notes, should_push=push, dry_run=dry_run
    )
    plan = unwrap(result)
    click.echo(f"✓ {result.message}")
    click.echo(f"  package: {plan.package_path}")
    click.echo(f"  version: {plan.previous_version} → {version}")
    if not push and not dry_run:
        click.echo(f"  push with: git push -u {repo.git.remote} {plan.branch_name}")
