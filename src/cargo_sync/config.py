"""
cargo_sync.config — Run settings.

Sources per setting, highest priority first:

    offline        --offline > CARGO_SYNC_OFFLINE > file > false
    allow_dirty    --allow-dirty > file > false
    sort_members   --sort-members > file > false
    cargo_args     file args, then args after `--` (both kept)
    cargo          CARGO > file > "cargo"
    git            CARGO_SYNC_GIT > file > "git"

.cargo-sync.yaml (in the start directory):

    offline: true
    allow_dirty: false
    sort_members: true
    cargo_args: ["--locked"]
    cargo: /opt/rust/bin/cargo
    git: git

Env vars:
    CARGO               — cargo program (same variable cargo sets for
                          its subcommands)
    CARGO_SYNC_GIT      — git program
    CARGO_SYNC_OFFLINE  — 1/true/yes → offline
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from cargo_sync.errors import ConfigError


CONFIG_FILE = ".cargo-sync.yaml"

_KNOWN_KEYS = {"offline", "allow_dirty", "sort_members", "cargo_args", "cargo", "git"}
_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class SyncConfig:
    """Resolved settings for one run."""
    start_dir: Path
    allow_dirty: bool = False
    offline: bool = False
    sort_members: bool = False
    cargo_args: tuple[str, ...] = ()
    cargo: str = "cargo"
    git: str = "git"

    @property
    def metadata_args(self) -> list[str]:
        """Extra flags forwarded to every cargo metadata call."""
        args = list(self.cargo_args)
        if self.offline and "--offline" not in args:
            args.append("--offline")
        return args


def read_config_file(start_dir: str | Path) -> dict[str, Any]:
    """Read .cargo-sync.yaml from the start directory.

    Returns an empty dict when the file does not exist.
    """
    path = Path(start_dir) / CONFIG_FILE
    if not path.exists():
        return {}

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must be a YAML mapping")

    unknown = sorted(set(data) - _KNOWN_KEYS)
    if unknown:
        raise ConfigError(f"Unknown key(s) in {path}: {', '.join(unknown)}")

    cargo_args = data.get("cargo_args", [])
    if not isinstance(cargo_args, list) or not all(
        isinstance(a, str) for a in cargo_args
    ):
        raise ConfigError(f"'cargo_args' in {path} must be a list of strings")

    for key in ("offline", "allow_dirty", "sort_members"):
        if key in data and not isinstance(data[key], bool):
            raise ConfigError(f"'{key}' in {path} must be true or false")

    return data


def _env_flag(name: str) -> bool | None:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return None
    return raw in _TRUTHY


def load_config(
    start_dir: str | Path | None = None,
    allow_dirty: bool | None = None,
    offline: bool | None = None,
    sort_members: bool | None = None,
    cargo_args: list[str] | tuple[str, ...] | None = None,
) -> SyncConfig:
    """Merge flags, env vars and the project file into a SyncConfig.

    Flag values of None mean "not given on the command line".
    Extra cargo args from the file come first, flag args after them.
    """
    ws = Path(start_dir or ".").resolve()
    file_cfg = read_config_file(ws)

    if offline is None:
        offline = _env_flag("CARGO_SYNC_OFFLINE")
    if offline is None:
        offline = file_cfg.get("offline", False)

    if allow_dirty is None:
        allow_dirty = file_cfg.get("allow_dirty", False)
    if sort_members is None:
        sort_members = file_cfg.get("sort_members", False)

    args = list(file_cfg.get("cargo_args", []))
    if cargo_args:
        args.extend(cargo_args)

    cargo = os.environ.get("CARGO") or file_cfg.get("cargo") or "cargo"
    git = os.environ.get("CARGO_SYNC_GIT") or file_cfg.get("git") or "git"

    return SyncConfig(
        start_dir=ws,
        allow_dirty=allow_dirty,
        offline=offline,
        sort_members=sort_members,
        cargo_args=tuple(args),
        cargo=str(cargo),
        git=str(git),
    )
