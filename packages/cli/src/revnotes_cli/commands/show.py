"""show command — a review with all of its comment threads."""

from __future__ import annotations

import click
from rich.console import Console

from revnotes_cli.helpers import get_store_and_config, print_details
from revnotes_core.review import AmbiguousReviewError, get_current, get_review
from revnotes_store.errors import GitError, NotesParseError

console = Console()


@click.command("show")
@click.argument("revision", required=False)
@click.pass_context
def show_cmd(ctx, revision: str | None):
    """Show the details of a review.

    REVISION is the commit the review request is attached to (a unique
    prefix is enough). Defaults to the open review for the current branch.
    """
    store, config = get_store_and_config(ctx)
    try:
        if revision:
            review = get_review(store, revision, config["request_ref"], config["comment_ref"])
        else:
            review = get_current(store, config["request_ref"], config["comment_ref"])
    except (GitError, NotesParseError, AmbiguousReviewError, ValueError) as e:
        raise click.ClickException(str(e))

    if review is None:
        console.print("[yellow]No review found.[/yellow]")
        return

    print_details(console, review)
