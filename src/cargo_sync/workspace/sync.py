"""
cargo_sync.workspace.sync — Workspace lockfile synchronization.

Flow:
    1. Safety gate         git status --short (unless --allow-dirty)
    2. Resolve workspace   cargo metadata --no-deps
    3. Preconditions       root Cargo.lock exists, no stale sentinel
    4. Conceal             Cargo.toml → _Cargo_sync_temp.toml
    5. Per member          copy root Cargo.lock → member/Cargo.lock,
                           cargo metadata in member dir (rewrites lock)
    6. Restore             _Cargo_sync_temp.toml → Cargo.toml, always

The first failing member stops the loop and gets its old lockfile back.
Members already done keep their new lockfiles.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Callable

from cargo_sync import vcs
from cargo_sync.cargo import ResolutionError, ResolutionScope, run_metadata
from cargo_sync.config import SyncConfig
from cargo_sync.errors import CargoSyncError, PreconditionError
from cargo_sync.workspace import metadata
from cargo_sync.workspace.conceal import (
    Concealment, TransactionError, check_no_stale_sentinel, find_stale_sentinel,
)
from cargo_sync.workspace.lockfile import (
    CopyError, checksum_bytes, copy_lockfile, lockfile_checksum, read_lockfile,
    restore_lockfile,
)
from cargo_sync.workspace.metadata import MemberDescriptor, WorkspaceDescriptor


class SyncOutcome(enum.Enum):
    SYNCHRONIZED = "synchronized"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class MemberResult:
    """Result of synchronizing one member."""
    member: MemberDescriptor
    outcome: SyncOutcome
    changed: bool = False
    reason: str | None = None


@dataclass
class SyncReport:
    """Result of a successful run."""
    workspace: WorkspaceDescriptor
    results: list[MemberResult] = field(default_factory=list)

    @property
    def changed(self) -> list[MemberResult]:
        return [r for r in self.results if r.changed]


class MissingLockfileError(PreconditionError):
    """Workspace root has no Cargo.lock to propagate."""
    pass


class MemberSyncError(CargoSyncError):
    """Synchronizing one member failed; the loop stopped there."""

    def __init__(self, message: str, failed: MemberResult,
                 completed: list[MemberResult]):
        super().__init__(message)
        self.failed = failed
        self.completed = completed


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# MEMBERS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
def sync_member(
    workspace: WorkspaceDescriptor,
    member: MemberDescriptor,
    config: SyncConfig,
) -> MemberResult:
    """Copy the root lockfile into one member and let cargo prune it.

    Expects the workspace manifest to be concealed already.
    """
    if member.directory == workspace.root_path:
        # non-virtual workspace: this member's lockfile is the root lockfile
        return MemberResult(
            member, SyncOutcome.SKIPPED,
            reason="member lives in the workspace root",
        )

    snapshot = read_lockfile(member.lockfile_path)
    before = checksum_bytes(snapshot)

    try:
        copy_lockfile(workspace.lockfile_path, member.lockfile_path)
        run_metadata(
            member.directory,
            ResolutionScope.STANDALONE,
            config.metadata_args,
            config.cargo,
        )
    except CopyError:
        restore_lockfile(member.lockfile_path, snapshot)
        raise
    except ResolutionError as e:
        # the failing member keeps its pre-run lockfile
        restore_lockfile(member.lockfile_path, snapshot)
        raise type(e)(
            f"failed to run cargo metadata in workspace member "
            f"{member.name}: {e}",
            command=e.command,
            returncode=e.returncode,
        ) from e

    after = lockfile_checksum(member.lockfile_path)
    return MemberResult(member, SyncOutcome.SYNCHRONIZED, changed=before != after)


def sync_all(
    workspace: WorkspaceDescriptor,
    members: tuple[MemberDescriptor, ...] | list[MemberDescriptor],
    config: SyncConfig,
    on_member: Callable[[MemberDescriptor], None] | None = None,
) -> list[MemberResult]:
    """Synchronize members in order, stopping at the first failure.

    Raises:
        MemberSyncError: wraps the failing member's error
    """
    results: list[MemberResult] = []
    for member in members:
        if on_member is not None:
            on_member(member)
        try:
            results.append(sync_member(workspace, member, config))
        except CargoSyncError as e:
            failed = MemberResult(member, SyncOutcome.FAILED, reason=str(e))
            raise MemberSyncError(str(e), failed, results) from e
    return results


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# TRANSACTION
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
def _restore_after_failure(txn: Concealment, error: BaseException) -> None:
    """Restore the manifest while `error` is in flight.

    A restore failure is attached to `error`; `error` stays the
    reported cause.
    """
    try:
        txn.end()
    except TransactionError as restore_error:
        if isinstance(error, CargoSyncError):
            error.restore_error = restore_error
        else:
            error.add_note(f"additionally: {restore_error}")


def run_concealed(
    workspace: WorkspaceDescriptor,
    members: tuple[MemberDescriptor, ...] | list[MemberDescriptor],
    config: SyncConfig,
    on_member: Callable[[MemberDescriptor], None] | None = None,
) -> list[MemberResult]:
    """Run sync_all with the workspace manifest concealed.

    The manifest is restored whether or not the loop succeeds.
    """
    txn = Concealment.begin(workspace.manifest_path)
    try:
        results = sync_all(workspace, members, config, on_member)
    except BaseException as e:
        _restore_after_failure(txn, e)
        raise
    txn.end()
    return results


def check_preconditions(workspace: WorkspaceDescriptor) -> None:
    """Checks that must pass before anything is renamed or copied."""
    check_no_stale_sentinel(workspace.manifest_path)
    if not workspace.lockfile_path.exists():
        raise MissingLockfileError(
            f"workspace lockfile not found: {workspace.lockfile_path} "
            f"(run `cargo generate-lockfile` first)"
        )


def synchronize(
    config: SyncConfig,
    on_member: Callable[[MemberDescriptor], None] | None = None,
    on_resolved: Callable[[WorkspaceDescriptor], None] | None = None,
) -> SyncReport:
    """Propagate the root Cargo.lock into every member's Cargo.lock.

    Args:
        config: Resolved run settings
        on_member: Called before each member is synchronized
        on_resolved: Called once the workspace layout is known

    Returns:
        SyncReport

    Raises:
        CargoSyncError: any failure; see cargo_sync.errors
    """
    vcs.ensure_clean(config.allow_dirty, config.start_dir, config.git)
    find_stale_sentinel(config.start_dir)

    workspace = metadata.resolve(
        config.start_dir, config.metadata_args, config.cargo,
    )
    if on_resolved is not None:
        on_resolved(workspace)

    check_preconditions(workspace)

    members = workspace.sorted_members() if config.sort_members else workspace.members
    results = run_concealed(workspace, members, config, on_member)

    return SyncReport(workspace=workspace, results=results)
