"""
cargo_sync.workspace.lockfile — Cargo.lock copy & checksum.

Checksum: SHA256 of the raw lockfile bytes, "sha256:<hex>".
Used to report which member lockfiles a run actually changed.
"""

from __future__ import annotations

import hashlib
import shutil
from pathlib import Path

from cargo_sync.errors import FilesystemError


class CopyError(FilesystemError):
    """Copying the root lockfile onto a member lockfile failed."""
    pass


def checksum_bytes(data: bytes | None) -> str | None:
    """Checksum of raw lockfile bytes, None for a missing lockfile."""
    if data is None:
        return None
    return f"sha256:{hashlib.sha256(data).hexdigest()}"


def lockfile_checksum(path: str | Path) -> str | None:
    """Checksum of a lockfile, None if it does not exist.

    Raises:
        CopyError: lockfile exists but cannot be read
    """
    return checksum_bytes(read_lockfile(path))


def copy_lockfile(source: str | Path, destination: str | Path) -> None:
    """Overwrite destination with the bytes of source.

    Raises:
        CopyError: source unreadable or destination not writable
    """
    try:
        shutil.copyfile(source, destination)
    except (OSError, shutil.SameFileError) as e:
        raise CopyError(
            f"failed to copy root lockfile {source} to workspace member "
            f"lockfile {destination}: {e}"
        ) from e


def read_lockfile(path: str | Path) -> bytes | None:
    """Raw lockfile bytes, None if it does not exist."""
    p = Path(path)
    if not p.exists():
        return None
    try:
        return p.read_bytes()
    except OSError as e:
        raise CopyError(f"failed to read lockfile {p}: {e}") from e


def restore_lockfile(path: str | Path, snapshot: bytes | None) -> None:
    """Put a lockfile back to a read_lockfile() snapshot.

    A None snapshot means the file did not exist and is removed.
    """
    p = Path(path)
    try:
        if snapshot is None:
            p.unlink(missing_ok=True)
        else:
            p.write_bytes(snapshot)
    except OSError as e:
        raise CopyError(f"failed to restore lockfile {p}: {e}") from e
