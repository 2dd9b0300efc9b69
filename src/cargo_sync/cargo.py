"""
cargo_sync.cargo — `cargo metadata` wrapper.

Two scopes:

    WORKSPACE   cargo metadata --format-version 1 --no-deps [args]
                run from anywhere inside the workspace; only reads.
    STANDALONE  cargo metadata --format-version 1 [args]
                run inside a member directory while the workspace
                manifest is concealed; cargo treats the member as its
                own package and rewrites its Cargo.lock as a side effect.

The working directory is always passed explicitly to the subprocess;
the process's own cwd is never changed.
"""

from __future__ import annotations

import enum
import json
import subprocess
from pathlib import Path
from typing import Any

from cargo_sync.errors import CargoSyncError


FORMAT_VERSION = "1"


class ResolutionScope(enum.Enum):
    WORKSPACE = "workspace"
    STANDALONE = "standalone"


class ResolutionError(CargoSyncError):
    """cargo could not be started or exited non-zero."""

    def __init__(self, message: str, command: list[str] | None = None,
                 returncode: int | None = None):
        super().__init__(message)
        self.command = command or []
        self.returncode = returncode


class MalformedOutputError(ResolutionError):
    """cargo output is not the JSON we expect."""
    pass


def metadata_command(
    scope: ResolutionScope,
    extra_args: list[str] | tuple[str, ...] | None = None,
    cargo: str = "cargo",
) -> list[str]:
    """Build the cargo metadata argv for a scope."""
    cmd = [cargo, "metadata", "--format-version", FORMAT_VERSION]
    if scope is ResolutionScope.WORKSPACE:
        cmd.append("--no-deps")
    if extra_args:
        cmd.extend(extra_args)
    return cmd


def run_metadata(
    cwd: str | Path,
    scope: ResolutionScope = ResolutionScope.WORKSPACE,
    extra_args: list[str] | tuple[str, ...] | None = None,
    cargo: str = "cargo",
) -> dict[str, Any]:
    """Run cargo metadata in cwd and return the decoded JSON.

    cargo's stderr is passed through so resolver progress
    (Updating, Locking, ...) stays visible.

    Raises:
        ResolutionError: cargo missing or non-zero exit
        MalformedOutputError: stdout is not a JSON object
    """
    cmd = metadata_command(scope, extra_args, cargo)

    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=None,
            text=True,
        )
    except OSError as e:
        raise ResolutionError(f"failed to run {cargo}: {e}", command=cmd) from e

    if result.returncode != 0:
        raise ResolutionError(
            f"`{' '.join(cmd)}` exited with status {result.returncode}",
            command=cmd,
            returncode=result.returncode,
        )

    try:
        data = json.loads(result.stdout)
    except json.JSONDecodeError as e:
        raise MalformedOutputError(
            f"cargo metadata output is not valid JSON: {e}", command=cmd,
        ) from e

    if not isinstance(data, dict):
        raise MalformedOutputError(
            "cargo metadata output must be a JSON object", command=cmd,
        )

    return data
