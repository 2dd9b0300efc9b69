"""
cargo_sync.cli — CLI entry point.

Commands:
  cargo-sync workspace-sync [flags] [-- cargo args]
      — Copy the workspace Cargo.lock into every member and re-resolve

Installed on PATH, cargo runs `cargo sync workspace-sync` as
`cargo-sync sync workspace-sync`; the extra `sync` is dropped.
"""

import sys

import click

from cargo_sync.cli.sync_cmd import workspace_sync_cmd


@click.group()
@click.version_option(package_name="cargo-sync")
def main():
    """cargo-sync — keep per-member Cargo.lock files in step with the workspace."""
    pass


main.add_command(workspace_sync_cmd, "workspace-sync")


def run(argv: list[str] | None = None):
    """Console script entry point."""
    args = list(sys.argv[1:] if argv is None else argv)
    if args and args[0] == "sync":
        args = args[1:]
    main(args=args, prog_name="cargo-sync")
