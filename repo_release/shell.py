"""Process and terminal helpers shared by the release commands.

git() is the single place a git subprocess is started; GitClient layers
stage names and error mapping on top of it. step() prints the banner that
opens each phase of a release.
"""

from __future__ import annotations

import subprocess
from pathlib import Path


def git(*args: str, cwd: Path | None = None, check: bool = True) -> str:
    """Run git in ``cwd`` and return its stripped stdout.

    Args:
        *args: Everything after ``git`` on the command line.
        cwd: Working tree to run in. Defaults to the current directory.
        check: Raise CalledProcessError on a non-zero exit. Pass False for
            lookups whose failure is an answer, like ``rev-parse``.
    """
    result = subprocess.run(
        ["git", *args], capture_output=True, text=True, check=check, cwd=cwd
    )
    return result.stdout.strip()


def step(msg: str) -> None:
    """Print ``msg`` between two rules, e.g. "Creating tag v1.2.0"."""
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")
