"""
cargo_sync — Per-member Cargo.lock synchronization for Cargo workspaces.

Copies the workspace Cargo.lock into every member and lets cargo prune
it down to what that member actually uses.
"""

from cargo_sync.config import SyncConfig, load_config
from cargo_sync.errors import (
    CargoSyncError,
    PreconditionError,
    FilesystemError,
    ConfigError,
)
from cargo_sync.cargo import ResolutionError, MalformedOutputError, ResolutionScope
from cargo_sync.workspace import (
    WorkspaceDescriptor,
    MemberDescriptor,
    SyncOutcome,
    SyncReport,
    synchronize,
)

__version__ = "0.1.0"

__all__ = [
    # config
    "SyncConfig",
    "load_config",
    # errors
    "CargoSyncError",
    "PreconditionError",
    "FilesystemError",
    "ConfigError",
    "ResolutionError",
    "MalformedOutputError",
    # workspace
    "ResolutionScope",
    "WorkspaceDescriptor",
    "MemberDescriptor",
    "SyncOutcome",
    "SyncReport",
    "synchronize",
]
