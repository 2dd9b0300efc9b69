"""
cargo_sync.cli.sync_cmd — cargo-sync workspace-sync command.

  cargo-sync workspace-sync                  — Sync every member lockfile
  cargo-sync workspace-sync --offline        — Pass --offline to cargo
  cargo-sync workspace-sync --allow-dirty    — Skip the git clean check
  cargo-sync workspace-sync -- --locked      — Extra cargo metadata args
"""

import sys
import click

from cargo_sync.config import load_config
from cargo_sync.errors import CargoSyncError
from cargo_sync.workspace.sync import (
    MemberSyncError, SyncOutcome, synchronize,
)


@click.command("workspace-sync", context_settings={"ignore_unknown_options": True})
@click.option("--allow-dirty", is_flag=True, default=False,
              help="Allow operation even with a dirty git working directory")
@click.option("--offline", is_flag=True, default=False,
              help="Pass the --offline flag to cargo")
@click.option("--sort-members", is_flag=True, default=False,
              help="Synchronize members in name order")
@click.option("-C", "--dir", "workspace_dir", default=None,
              type=click.Path(exists=True, file_okay=False),
              help="Directory to run in (default: pwd)")
@click.argument("cargo_args", nargs=-1, type=click.UNPROCESSED)
def workspace_sync_cmd(allow_dirty, offline, sort_members, workspace_dir, cargo_args):
    """Synchronize dependencies across members of a workspace where you
    are maintaining per-member lockfiles."""
    try:
        # a flag can only switch a setting on; unset falls through to env/file
        config = load_config(
            start_dir=workspace_dir,
            allow_dirty=allow_dirty or None,
            offline=offline or None,
            sort_members=sort_members or None,
            cargo_args=list(cargo_args),
        )
        report = synchronize(
            config,
            on_member=_echo_member,
            on_resolved=_echo_workspace,
        )
    except CargoSyncError as e:
        _echo_failure(e)
        sys.exit(1)

    for result in report.results:
        name = result.member.name
        if result.outcome is SyncOutcome.SKIPPED:
            click.echo(f"- {name}: skipped ({result.reason})", err=True)
        elif result.changed:
            click.echo(f"✓ {name}: Cargo.lock updated", err=True)
        else:
            click.echo(f"✓ {name}: Cargo.lock up to date", err=True)

    changed = len(report.changed)
    click.echo(
        f"Synchronized {len(report.results)} member(s), {changed} lockfile(s) changed.",
        err=True,
    )


def _echo_workspace(workspace):
    click.echo(f"workspace root toml: {workspace.manifest_path}")


def _echo_member(member):
    click.echo(f"syncing {member.directory}", err=True)


def _echo_failure(error: CargoSyncError):
    if isinstance(error, MemberSyncError):
        for result in error.completed:
            click.echo(f"✓ {result.member.name}: synchronized", err=True)
        click.echo(f"✗ {error.failed.member.name}: failed", err=True)

    click.echo(f"Error: {error}", err=True)

    if error.restore_error is not None:
        click.echo(
            f"CRITICAL: workspace manifest was not restored: {error.restore_error}",
            err=True,
        )
