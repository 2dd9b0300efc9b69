"""
tests/test_cargo.py — cargo metadata wrapper tests.
"""

import os
import sys
import json
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from cargo_sync.cargo import (
    MalformedOutputError, ResolutionError, ResolutionScope,
    metadata_command, run_metadata,
)


class TestCommand:
    def test_workspace_scope(self):
        cmd = metadata_command(ResolutionScope.WORKSPACE)
        assert cmd == ["cargo", "metadata", "--format-version", "1", "--no-deps"]

    def test_standalone_scope_resolves(self):
        cmd = metadata_command(ResolutionScope.STANDALONE, ["--offline"])
        assert "--no-deps" not in cmd
        assert cmd[-1] == "--offline"

    def test_custom_program(self):
        cmd = metadata_command(ResolutionScope.WORKSPACE, cargo="/opt/cargo")
        assert cmd[0] == "/opt/cargo"


class TestRunMetadata:
    def test_workspace_json(self, workspace, fake_cargo):
        data = run_metadata(workspace / "a", cargo=str(fake_cargo.program))
        assert data["workspace_root"] == str(workspace)
        assert len(data["workspace_members"]) == 2

    def test_runs_in_given_directory(self, workspace, fake_cargo):
        cwd = os.getcwd()
        run_metadata(workspace / "b", cargo=str(fake_cargo.program))
        assert os.getcwd() == cwd
        assert fake_cargo.calls()[0]["cwd"] == str(workspace / "b")

    def test_extra_args_forwarded(self, workspace, fake_cargo):
        run_metadata(workspace, extra_args=["--offline"], cargo=str(fake_cargo.program))
        assert fake_cargo.calls()[0]["args"][-1] == "--offline"

    def test_missing_program(self, tmp_path):
        with pytest.raises(ResolutionError, match="failed to run"):
            run_metadata(tmp_path, cargo=str(tmp_path / "no-such-cargo"))

    def test_nonzero_exit(self, tmp_path, fake_cargo):
        # no Cargo.toml anywhere under tmp_path
        with pytest.raises(ResolutionError) as exc:
            run_metadata(tmp_path, cargo=str(fake_cargo.program))
        assert exc.value.returncode == 101
        assert "--no-deps" in exc.value.command

    def test_invalid_json(self, workspace, fake_cargo, tmp_path, monkeypatch):
        out = tmp_path / "out.txt"
        out.write_text("warning: not json")
        monkeypatch.setenv("FAKE_CARGO_OUTPUT", str(out))
        with pytest.raises(MalformedOutputError, match="not valid JSON"):
            run_metadata(workspace, cargo=str(fake_cargo.program))

    def test_non_object_json(self, workspace, fake_cargo, tmp_path, monkeypatch):
        out = tmp_path / "out.json"
        out.write_text(json.dumps(["workspace_root"]))
        monkeypatch.setenv("FAKE_CARGO_OUTPUT", str(out))
        with pytest.raises(MalformedOutputError, match="JSON object"):
            run_metadata(workspace, cargo=str(fake_cargo.program))
