"""
cargo_sync.workspace.metadata — Workspace descriptor resolver.

One `cargo metadata --no-deps` call in workspace scope gives
everything a run needs:

    workspace_root       → root_path, Cargo.toml, Cargo.lock
    workspace_members    → member ids (in cargo's order)
    packages[]           → id, name, manifest_path per member
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from cargo_sync.cargo import (
    ResolutionScope, MalformedOutputError, run_metadata,
)
from cargo_sync.errors import PreconditionError


MANIFEST_NAME = "Cargo.toml"
LOCKFILE_NAME = "Cargo.lock"


@dataclass(frozen=True)
class MemberDescriptor:
    """A workspace member package."""
    id: str
    name: str
    directory: Path

    @property
    def manifest_path(self) -> Path:
        return self.directory / MANIFEST_NAME

    @property
    def lockfile_path(self) -> Path:
        return self.directory / LOCKFILE_NAME


@dataclass(frozen=True)
class WorkspaceDescriptor:
    """Resolved workspace layout."""
    root_path: Path
    members: tuple[MemberDescriptor, ...] = field(default_factory=tuple)

    @property
    def manifest_path(self) -> Path:
        return self.root_path / MANIFEST_NAME

    @property
    def lockfile_path(self) -> Path:
        return self.root_path / LOCKFILE_NAME

    def sorted_members(self) -> tuple[MemberDescriptor, ...]:
        return tuple(sorted(self.members, key=lambda m: m.name))


class TooFewMembersError(PreconditionError):
    """Workspace has fewer than two members."""
    pass


def _require(data: dict[str, Any], key: str, kind: type, where: str) -> Any:
    value = data.get(key)
    if not isinstance(value, kind):
        raise MalformedOutputError(
            f"cargo metadata: missing or invalid '{key}' in {where}"
        )
    return value


def parse_descriptor(data: dict[str, Any]) -> WorkspaceDescriptor:
    """Build a WorkspaceDescriptor from decoded cargo metadata JSON.

    Raises:
        MalformedOutputError: a required field is missing
        TooFewMembersError: fewer than two members
    """
    root = _require(data, "workspace_root", str, "output")
    member_ids = _require(data, "workspace_members", list, "output")
    packages = _require(data, "packages", list, "output")

    by_id: dict[str, dict[str, Any]] = {}
    for pkg in packages:
        if not isinstance(pkg, dict):
            raise MalformedOutputError("cargo metadata: package entry is not an object")
        by_id[_require(pkg, "id", str, "package")] = pkg

    members: list[MemberDescriptor] = []
    for member_id in member_ids:
        pkg = by_id.get(member_id)
        if pkg is None:
            raise MalformedOutputError(
                f"cargo metadata: workspace member {member_id!r} not in packages"
            )
        name = _require(pkg, "name", str, f"package {member_id!r}")
        manifest = _require(pkg, "manifest_path", str, f"package {name!r}")
        members.append(MemberDescriptor(
            id=member_id,
            name=name,
            directory=Path(manifest).parent,
        ))

    if len(members) < 2:
        names = ", ".join(m.name for m in members) or "none"
        raise TooFewMembersError(
            f"no point in running this program without multiple workspace "
            f"members (found: {names})"
        )

    return WorkspaceDescriptor(root_path=Path(root), members=tuple(members))


def resolve(
    start_dir: str | Path,
    extra_args: list[str] | tuple[str, ...] | None = None,
    cargo: str = "cargo",
) -> WorkspaceDescriptor:
    """Run cargo metadata in workspace scope and describe the workspace.

    Raises:
        ResolutionError: cargo failed
        MalformedOutputError: unexpected output
        TooFewMembersError: fewer than two members
    """
    data = run_metadata(
        start_dir, ResolutionScope.WORKSPACE, extra_args, cargo,
    )
    return parse_descriptor(data)
