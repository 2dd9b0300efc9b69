"""
tests/conftest.py — Shared fixtures.

Fake `cargo` and `git` executables on a temp bin dir, and a two-member
workspace on disk:

    ws/
    ├── Cargo.toml      [workspace] members = ["a", "b"]
    ├── Cargo.lock      a, b, dep@0.9.0, other@1.0.0
    ├── a/              depends on dep
    │   ├── Cargo.toml
    │   └── Cargo.lock  dep@0.9.0 with a stale checksum
    └── b/              depends on other
        ├── Cargo.toml
        └── Cargo.lock  already in sync
"""

import json
import os
import stat
import sys
from pathlib import Path

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from fake_cargo import render_lock


REGISTRY = "registry+https://github.com/rust-lang/crates.io-index"

DEP = {"name": "dep", "version": "0.9.0", "source": REGISTRY, "checksum": "aaaa"}
OTHER = {"name": "other", "version": "1.0.0", "source": REGISTRY, "checksum": "bbbb"}


def _write_executable(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


class FakeCargo:
    def __init__(self, program: Path, log: Path):
        self.program = program
        self.log = log

    def calls(self) -> list[dict]:
        if not self.log.exists():
            return []
        return [json.loads(line) for line in self.log.read_text().splitlines()]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("CARGO", "CARGO_SYNC_GIT", "CARGO_SYNC_OFFLINE",
                 "FAKE_CARGO_FAIL", "FAKE_CARGO_OUTPUT",
                 "FAKE_GIT_STATUS", "FAKE_GIT_EXIT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_cargo(tmp_path, monkeypatch) -> FakeCargo:
    script = Path(__file__).parent / "fake_cargo.py"
    program = _write_executable(
        tmp_path / "bin" / "cargo",
        f'#!/bin/sh\nexec "{sys.executable}" "{script}" "$@"\n',
    )
    log = tmp_path / "cargo-calls.jsonl"
    monkeypatch.setenv("CARGO", str(program))
    monkeypatch.setenv("FAKE_CARGO_LOG", str(log))
    return FakeCargo(program, log)


@pytest.fixture
def fake_git(tmp_path, monkeypatch) -> Path:
    """git that prints $FAKE_GIT_STATUS and exits with $FAKE_GIT_EXIT."""
    program = _write_executable(
        tmp_path / "bin" / "git",
        '#!/bin/sh\nprintf "%s" "$FAKE_GIT_STATUS"\nexit "${FAKE_GIT_EXIT:-0}"\n',
    )
    monkeypatch.setenv("CARGO_SYNC_GIT", str(program))
    return program


def write_member(root: Path, name: str, deps: list[str], lock: list[dict] | None):
    d = root / name
    d.mkdir(parents=True, exist_ok=True)
    dep_lines = "".join(f'{dep} = "*"\n' for dep in deps)
    (d / "Cargo.toml").write_text(
        f'[package]\nname = "{name}"\nversion = "0.1.0"\n\n'
        f"[dependencies]\n{dep_lines}"
    )
    if lock is not None:
        (d / "Cargo.lock").write_text(render_lock(lock))
    return d


def write_root(root: Path, members: list[str], lock: list[dict] | None):
    root.mkdir(parents=True, exist_ok=True)
    listed = ", ".join(f'"{m}"' for m in members)
    (root / "Cargo.toml").write_text(
        f'[workspace]\nresolver = "2"\nmembers = [{listed}]\n'
    )
    if lock is not None:
        (root / "Cargo.lock").write_text(render_lock(lock))


@pytest.fixture
def workspace(tmp_path) -> Path:
    root = tmp_path.resolve() / "ws"
    write_root(root, ["a", "b"], [
        {"name": "a", "version": "0.1.0", "dependencies": ["dep"]},
        {"name": "b", "version": "0.1.0", "dependencies": ["other"]},
        DEP,
        OTHER,
    ])
    write_member(root, "a", ["dep"], [
        {"name": "a", "version": "0.1.0", "dependencies": ["dep"]},
        dict(DEP, checksum="stale"),
    ])
    write_member(root, "b", ["other"], [
        {"name": "b", "version": "0.1.0", "dependencies": ["other"]},
        OTHER,
    ])
    return root
