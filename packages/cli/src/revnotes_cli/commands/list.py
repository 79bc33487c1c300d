"""list command — one-line summaries of reviews."""

from __future__ import annotations

import click
from rich.console import Console

from revnotes_cli.helpers import get_store_and_config, print_summary
from revnotes_core.review import list_all, list_open
from revnotes_store.errors import GitError, NotesParseError

console = Console()


@click.command("list")
@click.option("--all", "-a", "show_all", is_flag=True, help="Include reviews that have already been submitted.")
@click.pass_context
def list_cmd(ctx, show_all: bool):
    """List open code reviews.

    A review is open until its commit is reachable from its target ref.
    """
    store, config = get_store_and_config(ctx)
    lister = list_all if show_all else list_open
    try:
        reviews = lister(store, config["request_ref"], config["comment_ref"])
    except (GitError, NotesParseError) as e:
        raise click.ClickException(str(e))

    if not reviews:
        console.print("[yellow]No reviews found.[/yellow]" if show_all else "[yellow]No open reviews found.[/yellow]")
        return

    console.print(f"Loaded {len(reviews)} {'' if show_all else 'open '}review(s):")
    for review in reviews:
        print_summary(console, review)
