"""push / pull commands — share review notes through a git remote.

Transport is left entirely to git: these commands only choose the refspecs.
"""

from __future__ import annotations

import click
from rich.console import Console

from revnotes_cli.helpers import get_store_and_config
from revnotes_store.errors import GitError

console = Console()


@click.command("push")
@click.argument("remote", required=False)
@click.pass_context
def push_cmd(ctx, remote: str | None):
    """Push review notes to REMOTE (default: the configured remote)."""
    store, config = get_store_and_config(ctx)
    remote = remote or config["remote"]
    try:
        store.push_notes(remote, config["notes_ref_pattern"])
    except GitError as e:
        raise click.ClickException(str(e))
    console.print(f"[green]Pushed review notes to {remote}.[/green]")


@click.command("pull")
@click.argument("remote", required=False)
@click.pass_context
def pull_cmd(ctx, remote: str | None):
    """Fetch review notes from REMOTE and merge them into the local notes."""
    store, config = get_store_and_config(ctx)
    remote = remote or config["remote"]
    try:
        store.pull_notes(remote, config["notes_ref_pattern"])
    except GitError as e:
        raise click.ClickException(str(e))
    console.print(f"[green]Pulled review notes from {remote}.[/green]")
