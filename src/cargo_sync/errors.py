"""
cargo_sync.errors — Shared error types.

Module-specific errors (ResolutionError, TransactionError, CopyError, ...)
live next to the code that raises them and derive from these bases.
"""

from __future__ import annotations


class CargoSyncError(Exception):
    """Base error for a failed synchronization run."""

    def __init__(self, message: str):
        super().__init__(message)
        # Set when restoring the workspace manifest also failed
        self.restore_error: Exception | None = None


class PreconditionError(CargoSyncError):
    """Run refused before touching the workspace."""
    pass


class FilesystemError(CargoSyncError):
    """A rename or copy could not complete."""
    pass


class ConfigError(CargoSyncError):
    """Invalid .cargo-sync.yaml."""
    pass
