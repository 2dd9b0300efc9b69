"""cargo_sync.workspace — Workspace layout, concealment & lockfile sync."""

from cargo_sync.workspace.metadata import (
    WorkspaceDescriptor, MemberDescriptor, TooFewMembersError,
    parse_descriptor, resolve,
)
from cargo_sync.workspace.conceal import (
    Concealment, ConcealState, TransactionError, StaleConcealmentError,
)
from cargo_sync.workspace.lockfile import CopyError, copy_lockfile, lockfile_checksum
from cargo_sync.workspace.sync import (
    SyncOutcome, MemberResult, SyncReport, MissingLockfileError,
    MemberSyncError, sync_member, sync_all, synchronize,
)

__all__ = [
    "WorkspaceDescriptor", "MemberDescriptor", "TooFewMembersError",
    "parse_descriptor", "resolve",
    "Concealment", "ConcealState", "TransactionError", "StaleConcealmentError",
    "CopyError", "copy_lockfile", "lockfile_checksum",
    "SyncOutcome", "MemberResult", "SyncReport", "MissingLockfileError",
    "MemberSyncError", "sync_member", "sync_all", "synchronize",
]
