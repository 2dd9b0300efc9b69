"""
cargo_sync.workspace.conceal — Manifest concealment.

While the workspace Cargo.toml is renamed to _Cargo_sync_temp.toml,
cargo run inside a member directory finds no enclosing workspace and
resolves the member as a standalone package.

    txn = Concealment.begin(manifest)   # Cargo.toml → _Cargo_sync_temp.toml
    ...
    txn.end()                           # _Cargo_sync_temp.toml → Cargo.toml

Only one transaction may be open per workspace. A sentinel left behind
by an interrupted run blocks new runs until it is renamed back by hand.
"""

from __future__ import annotations

import enum
import os
from pathlib import Path

from cargo_sync.errors import FilesystemError, PreconditionError
from cargo_sync.workspace.metadata import MANIFEST_NAME


SENTINEL_NAME = "_Cargo_sync_temp.toml"


class ConcealState(enum.Enum):
    VISIBLE = "visible"
    HIDDEN = "hidden"


class TransactionError(FilesystemError):
    """Renaming the workspace manifest failed."""
    pass


class StaleConcealmentError(PreconditionError):
    """A sentinel from an earlier run is still present."""
    pass


def sentinel_path(manifest_path: str | Path) -> Path:
    return Path(manifest_path).with_name(SENTINEL_NAME)


def _stale_error(hidden: Path) -> StaleConcealmentError:
    return StaleConcealmentError(
        f"{hidden} exists: a previous run was interrupted before the "
        f"workspace manifest was restored. Rename it back to "
        f"{MANIFEST_NAME} (check it against version control) and run again."
    )


def check_no_stale_sentinel(manifest_path: str | Path) -> None:
    """Refuse to run if a previous run left the manifest concealed."""
    hidden = sentinel_path(manifest_path)
    if hidden.exists():
        raise _stale_error(hidden)


def find_stale_sentinel(start_dir: str | Path) -> None:
    """Look for a leftover sentinel in start_dir and its parents.

    Runs before the workspace is resolved: with the root manifest
    concealed, cargo would otherwise resolve some other (or no)
    workspace.
    """
    start = Path(start_dir).resolve()
    for d in [start, *start.parents]:
        hidden = d / SENTINEL_NAME
        if hidden.exists():
            raise _stale_error(hidden)


class Concealment:
    """Rename transaction for the workspace manifest."""

    def __init__(self, original_path: str | Path):
        self.original_path = Path(original_path)
        self.hidden_path = sentinel_path(self.original_path)
        self.state = ConcealState.VISIBLE

    @classmethod
    def begin(cls, manifest_path: str | Path) -> Concealment:
        """Hide the manifest. Raises TransactionError on failure."""
        txn = cls(manifest_path)
        check_no_stale_sentinel(txn.original_path)
        if not txn.original_path.exists():
            raise TransactionError(
                f"failed to rename workspace root {txn.original_path.name}: "
                f"{txn.original_path} does not exist"
            )
        try:
            os.rename(txn.original_path, txn.hidden_path)
        except OSError as e:
            raise TransactionError(
                f"failed to rename workspace root {txn.original_path.name}: {e}"
            ) from e
        txn.state = ConcealState.HIDDEN
        return txn

    def end(self) -> None:
        """Restore the manifest. Raises TransactionError on failure."""
        if self.state is ConcealState.VISIBLE:
            return
        if self.original_path.exists():
            # never clobber a manifest someone put back in the meantime
            raise TransactionError(
                f"failed to rename back workspace root {self.original_path.name}: "
                f"{self.original_path} already exists; the concealed copy is "
                f"still at {self.hidden_path}"
            )
        try:
            os.rename(self.hidden_path, self.original_path)
        except OSError as e:
            raise TransactionError(
                f"failed to rename back workspace root "
                f"{self.original_path.name}: {e}; the manifest is still at "
                f"{self.hidden_path}"
            ) from e
        self.state = ConcealState.VISIBLE

    @property
    def is_hidden(self) -> bool:
        return self.state is ConcealState.HIDDEN
