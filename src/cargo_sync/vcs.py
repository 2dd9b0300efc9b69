"""
cargo_sync.vcs — Safety gate.

Renames and lockfile copies are only reversible through version
control, so a run starts by asking git whether the working tree is
clean:

    git status --short

Any output means dirty. If git cannot run or exits non-zero the tree
is treated as dirty too.
"""

from __future__ import annotations

import enum
import subprocess
from pathlib import Path

import click

from cargo_sync.errors import PreconditionError


DIRTY_MESSAGE = (
    "Running this command with a dirty git working directory is unwise. "
    "Either commit pending changes (so you can see what changes this "
    "program makes) or run again with the --allow-dirty flag."
)


class Decision(enum.Enum):
    PROCEED = "proceed"
    ABORT = "abort"


class DirtyWorkingTreeError(PreconditionError):
    """Working tree has uncommitted changes and no override was given."""

    def __init__(self, message: str = DIRTY_MESSAGE):
        super().__init__(message)


class GitStatusError(Exception):
    """git status could not be run."""
    pass


def git_status(cwd: str | Path, git: str = "git") -> str:
    """Return `git status --short` output for the tree containing cwd.

    Raises:
        GitStatusError: git missing or exited non-zero
    """
    try:
        result = subprocess.run(
            [git, "status", "--short"],
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=None,  # pass through to the terminal
            text=True,
        )
    except OSError as e:
        raise GitStatusError(f"failed to run {git}: {e}") from e

    if result.returncode != 0:
        raise GitStatusError(f"{git} exited with status {result.returncode}")

    return result.stdout


def is_dirty(cwd: str | Path, git: str = "git") -> bool:
    """Whether the working tree has changes. Fails closed."""
    try:
        output = git_status(cwd, git)
    except GitStatusError as e:
        click.echo(f"⚠ Failed checking git working dir: {e}", err=True)
        return True
    return bool(output.strip())


def check(allow_override: bool, cwd: str | Path = ".", git: str = "git") -> Decision:
    """Decide whether the run may touch the workspace."""
    if allow_override:
        return Decision.PROCEED
    if is_dirty(cwd, git):
        return Decision.ABORT
    return Decision.PROCEED


def ensure_clean(allow_override: bool, cwd: str | Path = ".", git: str = "git") -> None:
    """Raise DirtyWorkingTreeError unless check() says PROCEED."""
    if check(allow_override, cwd, git) is Decision.ABORT:
        raise DirtyWorkingTreeError()
